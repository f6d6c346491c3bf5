import pytest

from loadout_engine import auto_equip, build_inventory_entries


@pytest.fixture
def make_row():
    """Factory for inventory rows shaped like the backend's inventory DTO."""

    def _make(inventory_id, name, weapon=None, item_type=None, **extra):
        row = {
            "id": inventory_id,
            "skinId": 1000 + inventory_id,
            "skinName": name,
            "weapon": weapon,
            "type": item_type,
            "price": 12.5,
        }
        row.update(extra)
        return row

    return _make


@pytest.fixture
def equip():
    """Build entries from inventory rows and run one auto-equip pass."""

    def _equip(rows, sections=None):
        return auto_equip(build_inventory_entries(rows, sections), sections)

    return _equip
