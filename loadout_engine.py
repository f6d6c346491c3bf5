"""
Loadout Assignment Engine
Classifies owned skins by team, greedily equips them into loadout slots and
defers ambiguous slots to a queue of pending choices the user resolves.

State is a plain dict passed into and returned from every operation:
- selection: {slot_key: {"ct": assignment, "t": assignment}}, where an
  assignment is {"item", "inventory_id", "claimed"}; claimed is True only when
  the assignment actually consumed a ledger use
- ledger: {inventory_id: times consumed}
- pending: [{"slot_key", "team", "options": [inventory entry, ...]}]
- entries: {inventory_id: inventory entry} for the run that built the state

Operations never mutate the state they are given. An inventory entry's
ledger count never exceeds its max_usage (2 for items usable on both sides,
1 otherwise).
"""

import sys

from loguru import logger

from loadout_config import (
    AGENT_SLOT_KEY,
    GROUPED_SLOT_KEYS,
    LOADOUT_SECTIONS,
    TEAM_BOTH,
    TEAM_BY_WEAPON,
    TEAM_CT,
    TEAM_T,
    TEAMS,
    agent_side,
    get_slot,
    is_agent_type,
    iter_slots,
    teams_for_slot,
)

STATUS_NO_MATCHES = "no_matches"
STATUS_RESOLVED = "resolved"
STATUS_PARTIAL = "partial"

# Selection store keys per team
SELECTION_KEYS = {TEAM_CT: "ct", TEAM_T: "t"}

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"


_verbose_sink_id = None


def enable_verbose_log(level="DEBUG"):
    """Echo records below INFO on stderr, next to the sinks already configured.

    Calling it again replaces the previous verbose sink, so it can run on
    every Streamlit rerun. Returns the loguru handler id.
    """
    global _verbose_sink_id
    if _verbose_sink_id is not None:
        try:
            logger.remove(_verbose_sink_id)
        except ValueError:
            pass  # already dropped by a logger.remove()

    info_no = logger.level("INFO").no
    _verbose_sink_id = logger.add(
        sys.stderr,
        level=level,
        format=LOG_FORMAT,
        filter=lambda record: record["level"].no < info_no,
    )
    return _verbose_sink_id


# ==================== Team classification ====================


def classify_team(item, slot=None):
    """Decide which side(s) can use an item.

    Args:
        item: Catalog item dict (name, weapon, type).
        slot: Slot the item is being classified for, if any.

    Returns:
        "CT", "T" or "Both". None only for an agent whose name matches both
        or neither call-sign table when classified for the agent slot, since
        an agent belongs to exactly one side.
    """
    if slot is not None and slot["key"] == AGENT_SLOT_KEY:
        return agent_side(item)

    weapon = item.get("weapon") or ""
    if weapon in TEAM_BY_WEAPON:
        return TEAM_BY_WEAPON[weapon]

    if is_agent_type(item):
        side = agent_side(item)
        if side is not None:
            return side

    # Unknown weapon: either side, the slot hint narrows it later
    return TEAM_BOTH


def max_usage_for(team):
    return 2 if team == TEAM_BOTH else 1


def find_slots(item, sections=None):
    """All slots whose membership rule accepts the item, in catalog order."""
    return [slot for slot in iter_slots(sections) if slot["filter"](item)]


# ==================== Inventory entries ====================


def inventory_row_to_item(row):
    """Convert an owned inventory row to the catalog item shape."""
    return {
        "id": row.get("skinId"),
        "name": row.get("skinName") or "",
        "weapon": row.get("weapon"),
        "type": row.get("type"),
        "imageUrl": row.get("imageUrl"),
        "rarity": row.get("rarity"),
        "collection": row.get("collection"),
        "price": row.get("price"),
    }


def build_inventory_entries(inventory_rows, sections=None):
    """Build inventory entries for every owned item that fits at least one slot.

    The item is classified against the first slot that accepts it. Agents
    that cannot be attributed to one side are left out.

    Raises:
        ValueError: if an inventory row has no id or an id repeats.
    """
    entries = []
    seen_ids = set()

    for row in inventory_rows:
        inventory_id = row.get("id")
        if inventory_id is None:
            raise ValueError(f"Inventory row without id: {row!r}")
        if inventory_id in seen_ids:
            raise ValueError(f"Duplicate inventory id {inventory_id}")
        seen_ids.add(inventory_id)

        item = inventory_row_to_item(row)
        slots = find_slots(item, sections)
        if not slots:
            continue

        team = classify_team(item, slots[0])
        if team is None:
            logger.debug(f"Skipping {item['name']!r}: no side for slot {slots[0]['key']}")
            continue

        entries.append(
            {
                "inventory_id": inventory_id,
                "item": item,
                "team": team,
                "max_usage": max_usage_for(team),
            }
        )

    logger.debug(f"Built {len(entries)} inventory entries from {len(seen_ids)} owned items")
    return entries


# ==================== Selection store helpers ====================


def empty_state():
    return {"selection": {}, "ledger": {}, "pending": [], "entries": {}}


def _copy_state(state):
    """Shallow-copy the mutable containers of a state; entries are immutable.

    The auto-equip "status" only describes the run that produced it and is
    not carried over.
    """
    return {
        **{key: value for key, value in state.items() if key != "status"},
        "selection": {key: dict(value) for key, value in state["selection"].items()},
        "ledger": dict(state["ledger"]),
        "pending": list(state["pending"]),
    }


def _check_team(team):
    if team not in SELECTION_KEYS:
        raise ValueError(f"Team must be CT or T, got {team!r}")
    return SELECTION_KEYS[team]


def get_assignment(selection, slot_key, team):
    return (selection.get(slot_key) or {}).get(_check_team(team))


def _set_assignment(selection, slot_key, team, item, inventory_id=None, claimed=False):
    selection.setdefault(slot_key, {})[_check_team(team)] = {
        "item": item,
        "inventory_id": inventory_id,
        "claimed": claimed,
    }


def _budget_for(state, inventory_id, item=None, slot=None):
    entry = state["entries"].get(inventory_id)
    if entry is not None:
        return entry["max_usage"]
    team = classify_team(item, slot) if item is not None else None
    return max_usage_for(team or TEAM_BOTH)


def _claim(ledger, inventory_id, budget):
    """Consume one use of an inventory item if any is left.

    Returns True when the ledger was incremented.
    """
    used = ledger.get(inventory_id, 0)
    if used >= budget:
        return False
    ledger[inventory_id] = used + 1
    return True


def _release(selection, ledger, assignment):
    """Give back the use an assignment claimed. Unclaimed assignments are a no-op.

    If another slot still holds the same item without a claim, it takes the
    use over and the ledger is left as is.
    """
    if not assignment or not assignment.get("claimed"):
        return
    inventory_id = assignment["inventory_id"]
    for teams in selection.values():
        for team_key, other in teams.items():
            if other is not assignment and other.get("inventory_id") == inventory_id and not other.get("claimed"):
                teams[team_key] = {**other, "claimed": True}
                return
    if ledger.get(inventory_id, 0) > 0:
        ledger[inventory_id] -= 1


# ==================== Assignment ====================


def auto_equip(entries, sections=None):
    """Equip owned items into every slot they fit, deferring ambiguous slots.

    For each slot in catalog order and each team it is evaluated for, the
    entries of the matching side that still have budget left are collected.
    A single candidate is assigned immediately; several candidates become one
    pending choice holding all of them. Pending choices do not consume budget.

    Args:
        entries: Inventory entries from build_inventory_entries().
        sections: Slot catalog (defaults to LOADOUT_SECTIONS).

    Returns:
        A fresh state dict plus "status":
        - "no_matches": nothing was assigned and nothing is pending
        - "resolved": at least one assignment, no pending choices
        - "partial": pending choices remain
    """
    selection = {}
    ledger = {entry["inventory_id"]: 0 for entry in entries}
    pending = []

    for slot in iter_slots(sections):
        candidates = [entry for entry in entries if slot["filter"](entry["item"])]
        if not candidates:
            continue

        for team in teams_for_slot(slot):
            usable = [
                entry
                for entry in candidates
                if entry["team"] in (team, TEAM_BOTH)
                and ledger[entry["inventory_id"]] < entry["max_usage"]
            ]
            if not usable:
                continue

            if len(usable) == 1:
                entry = usable[0]
                _set_assignment(selection, slot["key"], team, entry["item"], entry["inventory_id"], claimed=True)
                ledger[entry["inventory_id"]] += 1
                logger.debug(f"{slot['key']}/{team}: equipped {entry['item']['name']!r}")
            else:
                pending.append({"slot_key": slot["key"], "team": team, "options": usable})
                logger.debug(f"{slot['key']}/{team}: {len(usable)} candidates, deferred")

    assigned = sum(len(teams) for teams in selection.values())
    if pending:
        status = STATUS_PARTIAL
    elif assigned:
        status = STATUS_RESOLVED
    else:
        status = STATUS_NO_MATCHES

    logger.info(f"Auto-equip: {assigned} assigned, {len(pending)} pending ({status})")
    return {
        "status": status,
        "selection": selection,
        "ledger": ledger,
        "pending": pending,
        "entries": {entry["inventory_id"]: entry for entry in entries},
    }


# ==================== Pending choices ====================


def recompute_pending(ledger, pending):
    """Drop options that are out of budget and choices left without options.

    Never adds a choice and never grows an option list.
    """
    remaining = []
    for choice in pending:
        options = [
            entry
            for entry in choice["options"]
            if ledger.get(entry["inventory_id"], 0) < entry["max_usage"]
        ]
        if options:
            remaining.append({**choice, "options": options})
        else:
            logger.debug(f"{choice['slot_key']}/{choice['team']}: no options left, dropped")
    return remaining


def current_choice(state):
    """Head of the pending queue, or None when idle."""
    return state["pending"][0] if state["pending"] else None


def has_pending(state):
    return bool(state["pending"])


def resolve_choice(state, inventory_id):
    """Equip the chosen option of the head pending choice.

    If the slot/team already holds a different inventory item, that item's
    claim is released first. Remaining choices are then filtered against the
    updated ledger.

    Raises:
        ValueError: if nothing is pending or the id is not an option of the
            head choice.
    """
    choice = current_choice(state)
    if choice is None:
        raise ValueError("No pending choice to resolve")

    chosen = next((e for e in choice["options"] if e["inventory_id"] == inventory_id), None)
    if chosen is None:
        raise ValueError(
            f"Inventory item {inventory_id} is not an option for {choice['slot_key']}/{choice['team']}"
        )

    new_state = _copy_state(state)
    ledger = new_state["ledger"]
    slot_key, team = choice["slot_key"], choice["team"]

    previous = get_assignment(new_state["selection"], slot_key, team)
    previous_id = previous.get("inventory_id") if previous else None

    if previous_id == inventory_id:
        claimed = previous.get("claimed", False)
    else:
        _release(new_state["selection"], ledger, previous)
        claimed = _claim(ledger, inventory_id, chosen["max_usage"])
        if not claimed:
            raise ValueError(f"Inventory item {inventory_id} has no uses left")

    _set_assignment(new_state["selection"], slot_key, team, chosen["item"], inventory_id, claimed)
    new_state["pending"] = recompute_pending(ledger, new_state["pending"][1:])

    logger.info(f"Resolved {slot_key}/{team} with {chosen['item']['name']!r}, {len(new_state['pending'])} pending")
    return new_state


def skip_choice(state):
    """Drop the head pending choice without touching selection or ledger."""
    choice = current_choice(state)
    if choice is None:
        raise ValueError("No pending choice to skip")

    new_state = _copy_state(state)
    new_state["pending"] = new_state["pending"][1:]
    logger.info(f"Skipped {choice['slot_key']}/{choice['team']}, {len(new_state['pending'])} pending")
    return new_state


# ==================== Manual override ====================


def assign_manually(state, slot_key, team, item, inventory_id=None, sections=None):
    """Put any catalog item into a slot/team, bypassing automated matching.

    A previous inventory-backed assignment releases its claim. An
    inventory-backed pick claims one use of its item but is never refused
    for lack of budget. Pending choices for the same slot/team are dropped.

    Raises:
        ValueError: unknown slot, team other than CT/T, or a team the slot is
            not evaluated for.
    """
    slot = get_slot(slot_key, sections)
    _check_team(team)
    if team not in teams_for_slot(slot):
        raise ValueError(f"Slot {slot_key} is {slot['team_hint']}-only, cannot assign for {team}")

    new_state = _copy_state(state)
    ledger = new_state["ledger"]

    previous = get_assignment(new_state["selection"], slot_key, team)
    _release(new_state["selection"], ledger, previous)

    claimed = False
    if inventory_id is not None:
        claimed = _claim(ledger, inventory_id, _budget_for(new_state, inventory_id, item, slot))
    _set_assignment(new_state["selection"], slot_key, team, item, inventory_id, claimed)

    remaining = [
        choice
        for choice in new_state["pending"]
        if not (choice["slot_key"] == slot_key and choice["team"] == team)
    ]
    new_state["pending"] = recompute_pending(ledger, remaining)

    source = f"inventory #{inventory_id}" if inventory_id is not None else "catalog"
    logger.info(f"Manual pick {slot_key}/{team}: {item.get('name')!r} from {source}")
    return new_state


def clear_assignment(state, slot_key, team, sections=None):
    """Empty a slot/team, releasing its inventory claim if it had one."""
    get_slot(slot_key, sections)
    key = _check_team(team)

    new_state = _copy_state(state)
    slot_selection = new_state["selection"].get(slot_key) or {}
    _release(new_state["selection"], new_state["ledger"], slot_selection.pop(key, None))
    if not slot_selection:
        new_state["selection"].pop(slot_key, None)
    return new_state


# ==================== Persistence shape ====================


def flatten_selection(selection, sections=None):
    """One persistence entry per populated slot/team, catalog order, CT first."""
    rows = []
    for slot in iter_slots(sections):
        for team in TEAMS:
            assignment = get_assignment(selection, slot["key"], team)
            if not assignment:
                continue
            item = assignment["item"]
            rows.append(
                {
                    "slotKey": slot["key"],
                    "team": team,
                    "inventoryItemId": assignment.get("inventory_id"),
                    "skinId": item.get("id"),
                    "skinName": item.get("name") or "",
                    "imageUrl": item.get("imageUrl"),
                    "weapon": item.get("weapon"),
                    "type": item.get("type"),
                }
            )
    return rows


def state_from_loadout(loadout, entries=None, sections=None):
    """Rebuild a state from a saved loadout's entries.

    Inventory-backed entries claim one use each. Entries for unknown slots
    or teams are skipped.
    """
    state = empty_state()
    if entries:
        state["entries"] = {entry["inventory_id"]: entry for entry in entries}

    for row in loadout.get("entries") or []:
        slot_key, team = row.get("slotKey"), row.get("team")
        try:
            slot = get_slot(slot_key, sections)
        except ValueError:
            logger.warning(f"Saved loadout references unknown slot {slot_key!r}, skipped")
            continue
        if team not in TEAMS:
            logger.warning(f"Saved loadout entry {slot_key} has invalid team {team!r}, skipped")
            continue

        item = {
            "id": row.get("skinId"),
            "name": row.get("skinName") or "",
            "imageUrl": row.get("imageUrl"),
            "weapon": row.get("weapon"),
            "type": row.get("type"),
        }
        inventory_id = row.get("inventoryItemId")
        claimed = False
        if inventory_id is not None:
            claimed = _claim(state["ledger"], inventory_id, _budget_for(state, inventory_id, item, slot))
        _set_assignment(state["selection"], slot_key, team, item, inventory_id, claimed)

    logger.info(f"Loaded loadout {loadout.get('name')!r} with {len(flatten_selection(state['selection'], sections))} entries")
    return state


# ==================== Catalog browsing ====================


def slot_team_options(catalog, slot, team):
    """Catalog skins offered for a manual pick. Grouped slots ignore team."""
    skins = [skin for skin in catalog if slot["filter"](skin)]
    if slot["key"] in GROUPED_SLOT_KEYS:
        return skins
    return [skin for skin in skins if classify_team(skin, slot) in (team, TEAM_BOTH)]


def inventory_options(state, slot, team):
    """Owned entries of the current run that fit a slot/team."""
    return [
        entry
        for entry in state["entries"].values()
        if slot["filter"](entry["item"]) and entry["team"] in (team, TEAM_BOTH)
    ]


def group_slot_variants(skins, slot):
    """Group knife/glove skins into families by the name before "|".

    Returns a list of {"key", "label", "representative", "variants"} sorted
    by label, variants sorted by name.
    """
    default_label = "Gloves" if slot["key"] == "gloves" else "Knife"
    families = {}

    for skin in skins:
        name = skin.get("name") or ""
        label = name.split("|")[0].strip() or skin.get("weapon") or name or default_label
        family = families.setdefault(label.lower(), {"key": label.lower(), "label": label, "variants": []})
        family["variants"].append(skin)

    groups = []
    for family in families.values():
        variants = sorted(family["variants"], key=lambda s: (s.get("name") or "").lower())
        groups.append({**family, "variants": variants, "representative": variants[0]})

    return sorted(groups, key=lambda g: g["label"].lower())


def coverage_summary(selection, sections=None):
    """Filled vs. available slots per section and team."""
    rows = []
    for section in sections if sections is not None else LOADOUT_SECTIONS:
        for team in TEAMS:
            slots = [slot for slot in section["slots"] if team in teams_for_slot(slot)]
            filled = sum(1 for slot in slots if get_assignment(selection, slot["key"], team))
            rows.append({"section": section["title"], "team": team, "filled": filled, "total": len(slots)})
    return rows
