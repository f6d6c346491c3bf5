from loadout_config import TEAM_CT, TEAM_T, get_slot, matches_knife
from loadout_engine import (
    STATUS_NO_MATCHES,
    STATUS_PARTIAL,
    STATUS_RESOLVED,
    auto_equip,
    build_inventory_entries,
    get_assignment,
)


def assert_within_budget(result):
    for inventory_id, used in result["ledger"].items():
        assert 0 <= used <= result["entries"][inventory_id]["max_usage"]


def test_scenario_a_side_specific_rifles(make_row, equip):
    rows = [
        make_row(1, "AK-47 | X", "AK-47", "Rifle"),
        make_row(2, "M4A4 | Y", "M4A4", "Rifle"),
    ]
    result = equip(rows)

    assert result["status"] == STATUS_RESOLVED
    assert result["pending"] == []
    assert get_assignment(result["selection"], "ak-47", TEAM_T)["inventory_id"] == 1
    assert get_assignment(result["selection"], "m4a4", TEAM_CT)["inventory_id"] == 2
    assert result["ledger"] == {1: 1, 2: 1}
    # Side-specific slots are never filled for the other side
    assert get_assignment(result["selection"], "ak-47", TEAM_CT) is None


def test_scenario_b_two_awps_defer_both_sides(make_row, equip):
    rows = [
        make_row(1, "AWP | Asiimov", "AWP", "Sniper Rifle"),
        make_row(2, "AWP | Dragon Lore", "AWP", "Sniper Rifle"),
    ]
    result = equip(rows)

    assert result["status"] == STATUS_PARTIAL
    assert [(c["slot_key"], c["team"]) for c in result["pending"]] == [("awp", TEAM_CT), ("awp", TEAM_T)]
    for choice in result["pending"]:
        assert [e["inventory_id"] for e in choice["options"]] == [1, 2]
    # Deferred choices consume nothing
    assert result["ledger"] == {1: 0, 2: 0}
    assert "awp" not in result["selection"]


def test_scenario_c_single_knife_fills_both_sides(make_row, equip):
    result = equip([make_row(1, "★ Karambit | Fade", "Karambit", "Knife")])

    assert get_assignment(result["selection"], "knife", TEAM_CT)["inventory_id"] == 1
    assert get_assignment(result["selection"], "knife", TEAM_T)["inventory_id"] == 1
    assert result["ledger"][1] == 2
    assert result["status"] == STATUS_RESOLVED


def test_exhausted_item_cannot_fill_a_third_slot(make_row, equip):
    sections = [
        {
            "title": "Melee",
            "slots": [
                {"key": "knife", "label": "Knife", "team_hint": None, "filter": matches_knife},
                {"key": "spare-knife", "label": "Spare", "team_hint": None, "filter": matches_knife},
            ],
        }
    ]
    result = equip([make_row(1, "★ Karambit | Fade", "Karambit", "Knife")], sections)

    assert result["ledger"][1] == 2
    assert "spare-knife" not in result["selection"]
    assert result["pending"] == []


def test_no_matches_for_empty_inventory(equip):
    result = equip([])
    assert result["status"] == STATUS_NO_MATCHES
    assert result["selection"] == {}
    assert result["ledger"] == {}
    assert result["pending"] == []


def test_no_matches_when_nothing_fits_a_slot(make_row, equip):
    rows = [
        make_row(1, "Sticker | Crown (Foil)", None, "Sticker"),
        make_row(2, "SG 553 | Integrale", "SG 553", "Rifle"),
    ]
    result = equip(rows)
    assert result["status"] == STATUS_NO_MATCHES
    assert result["selection"] == {}


def test_singleton_is_assigned_without_a_choice(make_row, equip):
    result = equip([make_row(1, "AWP | Asiimov", "AWP", "Sniper Rifle")])

    assert get_assignment(result["selection"], "awp", TEAM_CT)["inventory_id"] == 1
    assert get_assignment(result["selection"], "awp", TEAM_T)["inventory_id"] == 1
    assert result["pending"] == []
    assert result["ledger"][1] == 2


def test_multiplicity_creates_exactly_one_choice(make_row, equip):
    rows = [make_row(i, f"M4A1-S | Skin {i}", "M4A1-S", "Rifle") for i in range(1, 5)]
    result = equip(rows)

    m4_choices = [c for c in result["pending"] if c["slot_key"] == "m4a1-s"]
    assert len(m4_choices) == 1
    assert m4_choices[0]["team"] == TEAM_CT
    assert [e["inventory_id"] for e in m4_choices[0]["options"]] == [1, 2, 3, 4]


def test_unhinted_slot_only_fills_the_item_side(make_row, equip):
    # MAC-10 is T-only, so the shared MP9 / MAC-10 slot is filled for T alone
    result = equip([make_row(1, "MAC-10 | Neon Rider", "MAC-10", "SMG")])

    assert get_assignment(result["selection"], "mp9", TEAM_T)["inventory_id"] == 1
    assert get_assignment(result["selection"], "mp9", TEAM_CT) is None


def test_mixed_slot_assigns_one_side_and_defers_none(make_row, equip):
    rows = [
        make_row(1, "MP9 | Hydra", "MP9", "SMG"),
        make_row(2, "MAC-10 | Neon Rider", "MAC-10", "SMG"),
    ]
    result = equip(rows)

    assert get_assignment(result["selection"], "mp9", TEAM_CT)["inventory_id"] == 1
    assert get_assignment(result["selection"], "mp9", TEAM_T)["inventory_id"] == 2
    assert result["pending"] == []


def test_agents_fill_their_own_side(make_row, equip):
    rows = [
        make_row(1, "Special Agent Ava | FBI", None, "Agent"),
        make_row(2, "Dragomir | Sabre", None, "Agent"),
    ]
    result = equip(rows)

    assert get_assignment(result["selection"], "agent", TEAM_CT)["inventory_id"] == 1
    assert get_assignment(result["selection"], "agent", TEAM_T)["inventory_id"] == 2


def test_deterministic(make_row):
    rows = [
        make_row(1, "AWP | Asiimov", "AWP"),
        make_row(2, "AWP | Dragon Lore", "AWP"),
        make_row(3, "AK-47 | Redline", "AK-47"),
        make_row(4, "★ Karambit | Fade", "Karambit", "Knife"),
        make_row(5, "★ Sport Gloves | Vice", None, "Gloves"),
        make_row(6, "★ Driver Gloves | King Snake", None, "Gloves"),
    ]
    first = auto_equip(build_inventory_entries(rows))
    second = auto_equip(build_inventory_entries(rows))

    for key in ("status", "selection", "ledger", "pending"):
        assert first[key] == second[key]


def test_budget_invariant_on_a_large_inventory(make_row, equip):
    rows = []
    weapons = ["AK-47", "M4A4", "AWP", "P250", "MP7", "Glock-18", "USP-S", "Nova", "MAG-7", "Sawed-Off"]
    for i in range(40):
        weapon = weapons[i % len(weapons)]
        rows.append(make_row(i + 1, f"{weapon} | Skin {i}", weapon))
    result = equip(rows)

    assert_within_budget(result)
    for choice in result["pending"]:
        assert len(choice["options"]) > 1
        slot = get_slot(choice["slot_key"])
        assert all(slot["filter"](e["item"]) for e in choice["options"])


def test_auto_equip_does_not_mutate_entries(make_row):
    entries = build_inventory_entries([make_row(1, "AK-47 | Redline", "AK-47")])
    snapshot = [dict(e) for e in entries]
    auto_equip(entries)
    assert entries == snapshot
