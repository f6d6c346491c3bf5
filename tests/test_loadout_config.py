import pytest

from loadout_config import (
    DEFAULT_SLOT_SKINS,
    LOADOUT_SECTIONS,
    TEAM_BOTH,
    TEAM_BY_WEAPON,
    TEAM_CT,
    TEAM_T,
    agent_side,
    get_default_slot_skin,
    get_fallback_image,
    get_slot,
    iter_slots,
    matches_agent,
    matches_gloves,
    matches_knife,
    teams_for_slot,
)


def test_slot_keys_are_unique():
    keys = [slot["key"] for slot in iter_slots()]
    assert len(keys) == len(set(keys))


def test_sections_keep_catalog_order():
    assert [section["title"] for section in LOADOUT_SECTIONS] == [
        "Body Equipment",
        "Pistols",
        "Mid-Tier",
        "Rifles",
    ]
    assert [slot["key"] for slot in iter_slots()][:4] == ["knife", "gloves", "agent", "glock-18"]


def test_every_slot_knows_its_section():
    for section in LOADOUT_SECTIONS:
        for slot in section["slots"]:
            assert slot["section"] == section["title"]


def test_get_slot_unknown_key():
    with pytest.raises(ValueError):
        get_slot("bazooka")


@pytest.mark.parametrize(
    "slot_key, expected",
    [
        ("ak-47", [TEAM_T]),
        ("m4a4", [TEAM_CT]),
        ("awp", [TEAM_CT, TEAM_T]),
        ("knife", [TEAM_CT, TEAM_T]),
    ],
)
def test_teams_for_slot(slot_key, expected):
    assert teams_for_slot(get_slot(slot_key)) == expected


def test_team_table_values_are_known_teams():
    assert set(TEAM_BY_WEAPON.values()) <= {TEAM_CT, TEAM_T, TEAM_BOTH}
    assert TEAM_BY_WEAPON["AK-47"] == TEAM_T
    assert TEAM_BY_WEAPON["M4A4"] == TEAM_CT
    assert TEAM_BY_WEAPON["AWP"] == TEAM_BOTH


def test_weapon_slots_match_case_insensitively():
    slot = get_slot("desert-eagle")
    assert slot["filter"]({"name": "Desert Eagle | Blaze", "weapon": "desert eagle"})
    assert slot["filter"]({"name": "R8 Revolver | Fade", "weapon": "R8 Revolver"})
    assert not slot["filter"]({"name": "P250 | Asiimov", "weapon": "P250"})


@pytest.mark.parametrize(
    "item, expected",
    [
        ({"name": "★ Karambit | Doppler", "weapon": "Karambit", "type": "Knife"}, True),
        ({"name": "★ M9 Bayonet | Fade", "weapon": "M9 Bayonet", "type": ""}, True),
        ({"name": "Falchion Case", "weapon": "", "type": "Container"}, False),
        ({"name": "Sticker | Bayonet Frog", "weapon": "", "type": "Sticker"}, False),
        ({"name": "AK-47 | Redline", "weapon": "AK-47", "type": "Rifle"}, False),
    ],
)
def test_matches_knife(item, expected):
    assert matches_knife(item) is expected


def test_matches_gloves():
    assert matches_gloves({"name": "★ Sport Gloves | Vice", "type": "Gloves"})
    assert not matches_gloves({"name": "AWP | Asiimov", "weapon": "AWP"})


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Special Agent Ava | FBI", TEAM_CT),
        ("Sir Bloody Miami Darryl | The Professionals", TEAM_T),
        ("Dragomir | Sabre", TEAM_T),
        ("Some Stranger | Nobody", None),
        # one CT and one T call-sign in the same name
        ("Special Agent Ava | Dragomir", None),
    ],
)
def test_agent_side(name, expected):
    assert agent_side({"name": name, "type": "Agent"}) == expected


def test_matches_agent_requires_agent_type_and_side():
    assert matches_agent({"name": "Special Agent Ava | FBI", "type": "Agent"})
    assert not matches_agent({"name": "Special Agent Ava | FBI", "type": "Sticker"})
    assert not matches_agent({"name": "Some Stranger | Nobody", "type": "Agent"})


def test_default_skin_falls_back_to_shared_entry():
    assert get_default_slot_skin("awp", TEAM_CT) is DEFAULT_SLOT_SKINS["awp"][TEAM_BOTH]
    assert get_default_slot_skin("mp9", TEAM_T)["name"] == "Default MAC-10"
    assert get_default_slot_skin("ak-47", TEAM_CT) is None
    assert get_default_slot_skin("bazooka", TEAM_CT) is None


def test_every_slot_has_a_default_skin():
    for slot in iter_slots():
        for team in teams_for_slot(slot):
            assert get_default_slot_skin(slot["key"], team) is not None, slot["key"]


def test_fallback_image():
    assert get_fallback_image({"weapon": "AWP"}) == "/photos/weapons/CS2_AWP_Inventory.png"
    assert get_fallback_image({"weapon": "Zeus x27", "imageUrl": "https://cdn/zeus.png"}) == "https://cdn/zeus.png"
    assert get_fallback_image({}) is None
