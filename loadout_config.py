"""
Static loadout configuration: slot catalog and classification tables.

Everything here is plain data plus the membership predicates that decide
which catalog items belong to which slot. The assignment engine only reads
these tables, so they can be audited and tested on their own.
"""

from urllib.parse import quote

TEAM_CT = "CT"
TEAM_T = "T"
TEAM_BOTH = "Both"

TEAMS = (TEAM_CT, TEAM_T)

# Slots whose catalog is browsed by family (base name before "|")
GROUPED_SLOT_KEYS = ("knife", "gloves")

AGENT_SLOT_KEY = "agent"

TEAM_BY_WEAPON = {
    "AK-47": TEAM_T,
    "Galil AR": TEAM_T,
    "Glock-18": TEAM_T,
    "Tec-9": TEAM_T,
    "MAC-10": TEAM_T,
    "Sawed-Off": TEAM_T,
    "PP-Bizon": TEAM_BOTH,
    "MP7": TEAM_BOTH,
    "MP5-SD": TEAM_BOTH,
    "UMP-45": TEAM_BOTH,
    "P90": TEAM_BOTH,
    "Nova": TEAM_BOTH,
    "XM1014": TEAM_BOTH,
    "MP9": TEAM_CT,
    "MAG-7": TEAM_CT,
    "M249": TEAM_BOTH,
    "Negev": TEAM_BOTH,
    "FAMAS": TEAM_CT,
    "AUG": TEAM_CT,
    "M4A4": TEAM_CT,
    "M4A1-S": TEAM_CT,
    "USP-S": TEAM_CT,
    "P2000": TEAM_CT,
    "Five-SeveN": TEAM_CT,
    "SCAR-20": TEAM_CT,
    "SG 553": TEAM_T,
    "Desert Eagle": TEAM_BOTH,
    "R8 Revolver": TEAM_BOTH,
    "Dual Berettas": TEAM_BOTH,
    "P250": TEAM_BOTH,
    "CZ75-Auto": TEAM_BOTH,
    "AWP": TEAM_BOTH,
    "G3SG1": TEAM_T,
    "SSG 08": TEAM_BOTH,
}

KNIFE_KEYWORDS = [
    "knife",
    "bayonet",
    "karambit",
    "dagger",
    "talon",
    "ursus",
    "navaja",
    "huntsman",
    "butterfly",
    "falchion",
    "stiletto",
    "paracord",
    "survival",
    "m9",
    "gut",
    "flip",
    "bowie",
]

# Checked before KNIFE_KEYWORDS: "case" would otherwise let "Falchion Case" in
NON_KNIFE_KEYWORDS = [
    "capsule",
    "case",
    "key",
    "sticker",
    "graffiti",
    "charm",
    "music kit",
    "patch",
    "pin",
]

CT_AGENT_PATTERNS = [
    "special agent ava",
    "michael syfers",
    "operator (swat)",
    "markus delrow",
    "chem-haz specialist",
    "lieutenant 'tree hugger' farlow",
    "bio-haz specialist",
    "1st lieutenant farlow",
    "sergeant bombson",
    "john 'van healen'",
    "d squadron officer",
    "seal team 6 soldier",
    "lt. commander ricksaw",
    "cmdr. davida 'goggles' fernandez",
    "cmdr. frank 'wet sox' baroud",
    "lieutenant rex krikey",
    "officer jacquess beltram",
    "chem-haz capitaine",
    "chef d'escadron rouchard",
    "sous-lieutenant medic",
    "two times' mccoy",
    "3rd commando company",
    "'blueberries' buckshot",
    "tacp cavalry",
    "usaf tacp",
]

T_AGENT_PATTERNS = [
    "number k",
    "the doctor' romanov",
    "sir bloody loudmouth darryl",
    "sir bloody miami darryl",
    "sir bloody silent darryl",
    "sir bloody darryl royale",
    "little kev",
    "safecracker voltzmann",
    "sir bloody skullhead darryl",
    "bloody darryl the strapped",
    "getaway sally",
    "the elite mr. muhlik",
    "prof. shahmat",
    "rezan the ready",
    "street soldier",
    "ground rebel",
    "elite trapper soliman",
    "trapper aggressor",
    "jungle rebel",
    "dragomir",
    "enforcer",
    "col. mangos dabisi",
    "trapper",
    "crosswater the forgotten",
    "osiris",
    "slingshot",
    "rezan the redshirt",
    "maximus",
    "vypa sista of the revolution",
    "arno the overgrown",
    "medium rare' crasswater",
]


def _lower_fields(item):
    """Return lowercased (name, weapon, type) of a catalog item."""
    return (
        (item.get("name") or "").lower(),
        (item.get("weapon") or "").lower(),
        (item.get("type") or "").lower(),
    )


def matches_knife(item):
    name, weapon, item_type = _lower_fields(item)
    fields = (name, weapon, item_type)

    if any(keyword in field for keyword in NON_KNIFE_KEYWORDS for field in fields):
        return False

    if "knife" in item_type:
        return True
    return any(keyword in weapon or keyword in name for keyword in KNIFE_KEYWORDS)


def matches_gloves(item):
    return any("glove" in field for field in _lower_fields(item))


def agent_side(item):
    """CT or T when exactly one call-sign table matches the item name, else None."""
    name = (item.get("name") or "").lower()
    is_ct = any(pattern in name for pattern in CT_AGENT_PATTERNS)
    is_t = any(pattern in name for pattern in T_AGENT_PATTERNS)

    if is_ct and not is_t:
        return TEAM_CT
    if is_t and not is_ct:
        return TEAM_T
    return None


def is_agent_type(item):
    return "agent" in (item.get("type") or "").lower()


def matches_agent(item):
    return is_agent_type(item) and agent_side(item) is not None


def weapon_filter(*weapon_names):
    """Build a membership predicate matching any of the given weapon names."""
    wanted = {name.lower() for name in weapon_names}

    def _matches(item):
        return (item.get("weapon") or "").lower() in wanted

    return _matches


def _slot(key, label, item_filter, team_hint=None, description=None):
    return {
        "key": key,
        "label": label,
        "description": description,
        "team_hint": team_hint,
        "filter": item_filter,
    }


LOADOUT_SECTIONS = [
    {
        "title": "Body Equipment",
        "slots": [
            _slot("knife", "Knife", matches_knife, description="Primary melee weapon"),
            _slot("gloves", "Gloves", matches_gloves, description="Show off your style"),
            _slot(AGENT_SLOT_KEY, "Agent", matches_agent, description="Choose your character model"),
        ],
    },
    {
        "title": "Pistols",
        "slots": [
            _slot("glock-18", "Glock-18", weapon_filter("Glock-18"), TEAM_T),
            _slot("usp-s", "USP-S", weapon_filter("USP-S"), TEAM_CT),
            _slot("p2000", "P2000", weapon_filter("P2000"), TEAM_CT),
            _slot("p250", "P250", weapon_filter("P250")),
            _slot("dual-berettas", "Dual Berettas", weapon_filter("Dual Berettas")),
            _slot("five-seven", "Five-SeveN", weapon_filter("Five-SeveN"), TEAM_CT),
            _slot("tec-9", "Tec-9", weapon_filter("Tec-9"), TEAM_T),
            _slot("cz75-auto", "CZ75-Auto", weapon_filter("CZ75-Auto")),
            _slot("desert-eagle", "Desert Eagle / R8", weapon_filter("Desert Eagle", "R8 Revolver")),
        ],
    },
    {
        "title": "Mid-Tier",
        "slots": [
            _slot("mp9", "MP9 / MAC-10", weapon_filter("MP9", "MAC-10")),
            _slot("mp5", "MP5 / MP7", weapon_filter("MP5-SD", "MP7")),
            _slot("ump-45", "UMP-45", weapon_filter("UMP-45")),
            _slot("p90", "P90", weapon_filter("P90")),
            _slot("pp-bizon", "PP-Bizon", weapon_filter("PP-Bizon")),
            _slot("nova", "Nova / XM1014", weapon_filter("Nova", "XM1014")),
            _slot("mag-7", "MAG-7 / Sawed-Off", weapon_filter("MAG-7", "Sawed-Off")),
        ],
    },
    {
        "title": "Rifles",
        "slots": [
            _slot("ak-47", "AK-47", weapon_filter("AK-47"), TEAM_T),
            _slot("m4a4", "M4A4", weapon_filter("M4A4"), TEAM_CT),
            _slot("m4a1-s", "M4A1-S", weapon_filter("M4A1-S"), TEAM_CT),
            _slot("famas", "FAMAS", weapon_filter("FAMAS"), TEAM_CT),
            _slot("galil-ar", "Galil AR", weapon_filter("Galil AR"), TEAM_T),
            _slot("awp", "AWP", weapon_filter("AWP")),
            _slot("ssg-08", "SSG 08", weapon_filter("SSG 08")),
            _slot("scar-g3sg1", "SCAR-20 / G3SG1", weapon_filter("SCAR-20", "G3SG1")),
            _slot("m249-negev", "M249 / Negev", weapon_filter("M249", "Negev")),
        ],
    },
]

for _section in LOADOUT_SECTIONS:
    for _s in _section["slots"]:
        _s["section"] = _section["title"]


def iter_slots(sections=None):
    """Yield every slot in stable catalog order."""
    for section in sections if sections is not None else LOADOUT_SECTIONS:
        yield from section["slots"]


def get_slot(slot_key, sections=None):
    """Look up a slot by key. Raises ValueError for unknown keys."""
    for slot in iter_slots(sections):
        if slot["key"] == slot_key:
            return slot
    raise ValueError(f"Unknown loadout slot: {slot_key!r}")


def teams_for_slot(slot):
    """Teams a slot is evaluated for: its hint, or both sides when unhinted."""
    hint = slot.get("team_hint")
    if hint in TEAMS:
        return [hint]
    return [TEAM_CT, TEAM_T]


# --- Default skins for empty slots ---

PLACEHOLDER_COLORS = {
    TEAM_CT: "1E3A8A",
    TEAM_T: "92400E",
    TEAM_BOTH: "4C1D95",
}


def placeholder_image(label, team):
    return f"https://via.placeholder.com/400x240/{PLACEHOLDER_COLORS[team]}/FFFFFF?text={quote(label)}"


def _default(name, weapon, item_type, team, image_url=None):
    return {
        "name": name,
        "weapon": weapon,
        "type": item_type,
        "imageUrl": image_url or placeholder_image(weapon, team),
    }


DEFAULT_SLOT_SKINS = {
    "knife": {
        TEAM_BOTH: _default("Vanilla Knife", "Knife", "Knife", TEAM_BOTH, "/photos/weapons/Knife_cs2_bothSides.webp"),
    },
    "gloves": {
        TEAM_BOTH: _default("Default Gloves", "Gloves", "Gloves", TEAM_BOTH, "/photos/weapons/default_gloves.webp"),
    },
    "agent": {
        TEAM_CT: _default("Seal Team 6 Soldier", "Agent", "Agent", TEAM_CT, "/photos/weapons/cs_default_agents.webp"),
        TEAM_T: _default("Dragomir", "Agent", "Agent", TEAM_T, "/photos/weapons/tside_agents.webp"),
    },
    "glock-18": {TEAM_T: _default("Default Glock-18", "Glock-18", "Pistol", TEAM_T)},
    "usp-s": {
        TEAM_CT: _default("Default USP-S", "USP-S", "Pistol", TEAM_CT, "/photos/weapons/CS2_USP-S_Inventory.webp"),
    },
    "p2000": {TEAM_CT: _default("Default P2000", "P2000", "Pistol", TEAM_CT)},
    "p250": {TEAM_BOTH: _default("Default P250", "P250", "Pistol", TEAM_BOTH)},
    "dual-berettas": {TEAM_BOTH: _default("Default Dual Berettas", "Dual Berettas", "Pistol", TEAM_BOTH)},
    "five-seven": {TEAM_CT: _default("Default Five-SeveN", "Five-SeveN", "Pistol", TEAM_CT)},
    "tec-9": {TEAM_T: _default("Default Tec-9", "Tec-9", "Pistol", TEAM_T)},
    "cz75-auto": {TEAM_BOTH: _default("Default CZ75-Auto", "CZ75-Auto", "Pistol", TEAM_BOTH)},
    "desert-eagle": {
        TEAM_BOTH: _default(
            "Default Desert Eagle", "Desert Eagle", "Pistol", TEAM_BOTH,
            "/photos/weapons/CS2_Desert_Eagle_Inventory.webp",
        ),
    },
    "mp9": {
        TEAM_CT: _default("Default MP9", "MP9", "SMG", TEAM_CT),
        TEAM_T: _default("Default MAC-10", "MAC-10", "SMG", TEAM_T),
    },
    "mp5": {
        TEAM_CT: _default("Default MP5-SD", "MP5-SD", "SMG", TEAM_CT),
        TEAM_T: _default("Default MP7", "MP7", "SMG", TEAM_T),
    },
    "ump-45": {TEAM_BOTH: _default("Default UMP-45", "UMP-45", "SMG", TEAM_BOTH)},
    "p90": {TEAM_BOTH: _default("Default P90", "P90", "SMG", TEAM_BOTH)},
    "pp-bizon": {TEAM_BOTH: _default("Default PP-Bizon", "PP-Bizon", "SMG", TEAM_BOTH)},
    "nova": {
        TEAM_CT: _default("Default Nova", "Nova", "Shotgun", TEAM_CT),
        TEAM_T: _default("Default XM1014", "XM1014", "Shotgun", TEAM_T),
    },
    "mag-7": {
        TEAM_CT: _default("Default MAG-7", "MAG-7", "Shotgun", TEAM_CT),
        TEAM_T: _default("Default Sawed-Off", "Sawed-Off", "Shotgun", TEAM_T),
    },
    "ak-47": {TEAM_T: _default("Default AK-47", "AK-47", "Rifle", TEAM_T)},
    "m4a4": {TEAM_CT: _default("Default M4A4", "M4A4", "Rifle", TEAM_CT)},
    "m4a1-s": {TEAM_CT: _default("Default M4A1-S", "M4A1-S", "Rifle", TEAM_CT)},
    "famas": {TEAM_CT: _default("Default FAMAS", "FAMAS", "Rifle", TEAM_CT)},
    "galil-ar": {TEAM_T: _default("Default Galil AR", "Galil AR", "Rifle", TEAM_T)},
    "awp": {TEAM_BOTH: _default("Default AWP", "AWP", "Sniper Rifle", TEAM_BOTH)},
    "ssg-08": {TEAM_BOTH: _default("Default SSG 08", "SSG 08", "Sniper Rifle", TEAM_BOTH)},
    "scar-g3sg1": {
        TEAM_CT: _default("Default SCAR-20", "SCAR-20", "Sniper Rifle", TEAM_CT),
        TEAM_T: _default("Default G3SG1", "G3SG1", "Sniper Rifle", TEAM_T),
    },
    "m249-negev": {
        TEAM_CT: _default("Default M249", "M249", "Machine Gun", TEAM_CT),
        TEAM_T: _default("Default Negev", "Negev", "Machine Gun", TEAM_T),
    },
}


def get_default_slot_skin(slot_key, team):
    """Stock skin shown for an empty slot, falling back to the shared entry."""
    entry = DEFAULT_SLOT_SKINS.get(slot_key)
    if not entry:
        return None
    return entry.get(team) or entry.get(TEAM_BOTH)


WEAPON_FALLBACK_IMAGES = {
    "AK-47": "CS2_AK-47_Inventory.png",
    "AUG": "CS2_AUG_Inventory.webp",
    "AWP": "CS2_AWP_Inventory.png",
    "CZ75-Auto": "CS2_CZ75-Auto_Inventory.webp",
    "Desert Eagle": "CS2_Desert_Eagle_Inventory.webp",
    "Dual Berettas": "CS2_Dual_Berettas_Inventory.webp",
    "FAMAS": "CS2_FAMAS_Inventory.webp",
    "Five-SeveN": "CS2_Five-SeveN_Inventory.webp",
    "G3SG1": "CS2_G3SG1_Inventory.webp",
    "Galil AR": "CS2_Galil_AR_Inventory.webp",
    "Glock-18": "CS2_Glock-18_Inventory.webp",
    "M4A1-S": "CS2_M4A1-S_Inventory.png",
    "M4A4": "CS2_M4A4_Inventory.webp",
    "M249": "CS2_M249_Inventory.webp",
    "MAC-10": "CS2_MAC-10_Inventory.webp",
    "MAG-7": "CS2_MAG-7_Inventory.png",
    "MP5-SD": "CS2_MP5-SD_Inventory.webp",
    "MP7": "CS2_MP7_Inventory.webp",
    "MP9": "CS2_MP9_Inventory.webp",
    "Negev": "CS2_Negev_Inventory.webp",
    "Nova": "CS2_Nova_Inventory.png",
    "P90": "CS2_P90_Inventory.png",
    "P2000": "CS2_P2000_Inventory.webp",
    "P250": "CS2_P250_Inventory.webp",
    "PP-Bizon": "CS2_PP-Bizon_Inventory.webp",
    "R8 Revolver": "CS2_R8_Revolver_Inventory.webp",
    "Sawed-Off": "CS2_Sawed-Off_Inventory.webp",
    "SCAR-20": "CS2_SCAR-20_Inventory.png",
    "SG 553": "CS2_SG_553_Inventory.webp",
    "SSG 08": "CS2_SSG_08_Inventory.webp",
    "Tec-9": "CS2_Tec-9_Inventory.webp",
    "UMP-45": "CS2_UMP-45_Inventory.webp",
    "XM1014": "CS2_XM1014_Inventory.png",
}

WEAPON_IMAGE_DIR = "/photos/weapons"


def get_fallback_image(item):
    """Stock weapon image for an item, or its own imageUrl when unknown."""
    weapon = item.get("weapon") or item.get("type") or ""
    filename = WEAPON_FALLBACK_IMAGES.get(weapon)
    if filename:
        return f"{WEAPON_IMAGE_DIR}/{filename}"
    return item.get("imageUrl")
