from unittest.mock import patch

from repositories import LocationsRepository
from scripts import seed_locations


def test_seed_inserts_sample_locations_and_truncate_resets(session_factory):
    with patch.object(seed_locations, "SessionLocal", session_factory):
        assert seed_locations.seed() == 4
        assert seed_locations.seed(truncate=True) == 4

    with session_factory() as session:
        locations = LocationsRepository().list_locations(session, include_codes=True)

    assert len(locations) == 4
    assert {loc.name for loc in locations} == {
        "Best Buy",
        "Tatte Bakery & Cafe",
        "Panera Bread",
        "Raising Cane's",
    }
    best_buy = next(loc for loc in locations if loc.name == "Best Buy")
    assert best_buy.latest_code.code == "13579#"
    assert best_buy.provider_place_id is None
