"""
Streamlit Web UI for the Loadout Cooker
"""

import json
import os
import sys
from datetime import datetime

# Set Streamlit config directory to project directory (must be before streamlit import)
os.environ.setdefault("STREAMLIT_CONFIG_DIR", os.path.dirname(os.path.abspath(__file__)))

import altair as alt
import pandas as pd
import streamlit as st
from loguru import logger

import skin_api
from i18n import t, team_label, language_selector
from loadout_config import (
    GROUPED_SLOT_KEYS,
    LOADOUT_SECTIONS,
    TEAM_CT,
    TEAM_T,
    get_default_slot_skin,
    get_fallback_image,
    get_slot,
    teams_for_slot,
)
from loadout_engine import (
    STATUS_NO_MATCHES,
    STATUS_PARTIAL,
    assign_manually,
    auto_equip,
    build_inventory_entries,
    clear_assignment,
    coverage_summary,
    current_choice,
    empty_state,
    enable_verbose_log,
    flatten_selection,
    get_assignment,
    group_slot_variants,
    has_pending,
    inventory_options,
    resolve_choice,
    skip_choice,
    slot_team_options,
    state_from_loadout,
)

MAX_SAVED_LOADOUTS = 2
SLOT_COLUMNS = 4

# Configure loguru for Streamlit (reduce noise for UI)
logger.remove()
logger.add(
    sys.stderr,
    format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
    level="INFO",
    filter=lambda record: record["level"].name != "DEBUG",
)

# Also log to file with rotation (if possible)
_log_dir = os.path.join(os.path.dirname(__file__), "logs")
try:
    os.makedirs(_log_dir, exist_ok=True)
    logger.add(
        os.path.join(_log_dir, "loadout_cooker_{time}.log"),
        rotation="5 MB",
        retention="3 days",
        level="DEBUG",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
    )
except (OSError, PermissionError):
    # File logging not available, continue with console only
    pass

st.set_page_config(
    page_title="Loadout Cooker",
    page_icon="🔪",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_data(show_spinner=False)
def load_catalog():
    """Fetch the full skin catalog (cached)."""
    return skin_api.fetch_catalog()


@st.cache_data(show_spinner=False, ttl=300)
def load_inventory(user_id):
    """Fetch a user's owned items (cached for 5 minutes)."""
    return skin_api.fetch_inventory(user_id)


@st.cache_data(show_spinner=False)
def catalog_for_slot(slot_key, team, _catalog):
    """Catalog skins for a slot/team picker (cached per slot and team)."""
    return slot_team_options(_catalog, get_slot(slot_key), team)


def get_state():
    if "loadout_state" not in st.session_state:
        st.session_state.loadout_state = empty_state()
    return st.session_state.loadout_state


def set_state(state):
    st.session_state.loadout_state = state


def set_notice(level, message):
    st.session_state.notice = (level, message)


def show_notice():
    notice = st.session_state.pop("notice", None)
    if not notice:
        return
    level, message = notice
    {"success": st.success, "warning": st.warning, "info": st.info, "error": st.error}[level](message)


def get_image_url(item):
    """Remote image for an item, if any (local /photos paths are not served here)."""
    url = item.get("imageUrl") or get_fallback_image(item)
    if url and url.startswith(("http://", "https://")):
        return url
    return None


def run_auto_equip(user_id):
    """Rebuild the loadout from the user's inventory, discarding the current one."""
    logger.info(f"User {user_id} started auto-equip")
    try:
        inventory = load_inventory(user_id)
    except Exception as e:
        set_notice("error", f"{t('equip.failed_inventory')}: {e}")
        return

    entries = build_inventory_entries(inventory)
    result = auto_equip(entries)
    set_state(result)

    if result["status"] == STATUS_NO_MATCHES:
        set_notice("warning", t("equip.no_matches"))
    elif result["status"] == STATUS_PARTIAL:
        set_notice("info", t("equip.partial", pending=len(result["pending"])))
    else:
        set_notice("success", t("equip.resolved", count=len(flatten_selection(result["selection"]))))


def render_pending_choice(state):
    """Show the head pending choice with one button per option."""
    choice = current_choice(state)
    slot = get_slot(choice["slot_key"])
    team = choice["team"]

    with st.container(border=True):
        st.subheader(f"🎯 {t('pending.header', slot=slot['label'], team=team_label(team))}")
        st.caption(t("pending.remaining", count=len(state["pending"])))

        cols = st.columns(min(len(choice["options"]), SLOT_COLUMNS))
        for index, entry in enumerate(choice["options"]):
            item = entry["item"]
            inventory_id = entry["inventory_id"]
            with cols[index % len(cols)]:
                image_url = get_image_url(item)
                if image_url:
                    st.image(image_url, width=140)
                st.markdown(f"**{item['name']}**")
                if item.get("collection"):
                    st.caption(item["collection"])
                st.caption(
                    t("pending.uses", used=state["ledger"].get(inventory_id, 0), max=entry["max_usage"])
                )
                if st.button(t("pending.equip"), key=f"resolve_{slot['key']}_{team}_{inventory_id}"):
                    set_state(resolve_choice(state, inventory_id))
                    st.rerun()

        if st.button(f"⏭️ {t('pending.skip')}", key=f"skip_{slot['key']}_{team}"):
            set_state(skip_choice(state))
            st.rerun()


def render_slot_picker(slot, team, state, catalog):
    """Manual pick from the catalog or from owned items."""
    widget_key = f"{slot['key']}_{team}"
    source = st.radio(
        t("picker.source"),
        ["catalog", "inventory"],
        format_func=lambda x: t(f"picker.source_{x}"),
        horizontal=True,
        key=f"src_{widget_key}",
    )

    if source == "inventory":
        entries = inventory_options(state, slot, team)
        if not entries:
            st.caption(t("picker.no_owned"))
            return
        picked = st.selectbox(
            t("picker.owned_item"),
            entries,
            format_func=lambda e: f"{e['item']['name']} ({state['ledger'].get(e['inventory_id'], 0)}/{e['max_usage']})",
            key=f"owned_{widget_key}",
        )
        if st.button(t("picker.equip"), key=f"equip_owned_{widget_key}"):
            set_state(assign_manually(state, slot["key"], team, picked["item"], picked["inventory_id"]))
            st.rerun()
        return

    skins = catalog_for_slot(slot["key"], team, catalog)
    search = st.text_input(t("picker.search"), key=f"search_{widget_key}")
    if search:
        needle = search.lower()
        skins = [
            s for s in skins
            if needle in (s.get("name") or "").lower() or needle in (s.get("weapon") or "").lower()
        ]
    if not skins:
        st.caption(t("picker.no_matches"))
        return

    if slot["key"] in GROUPED_SLOT_KEYS:
        families = group_slot_variants(skins, slot)
        family = st.selectbox(
            t("picker.family"),
            families,
            format_func=lambda f: f"{f['label']} ({len(f['variants'])})",
            key=f"family_{widget_key}",
        )
        skins = family["variants"]

    picked = st.selectbox(
        t("picker.skin"),
        skins,
        format_func=lambda s: s.get("name") or "?",
        key=f"skin_{widget_key}",
    )
    if st.button(t("picker.equip"), key=f"equip_catalog_{widget_key}"):
        set_state(assign_manually(state, slot["key"], team, picked))
        st.rerun()


def render_slot_card(slot, team, state, catalog):
    assignment = get_assignment(state["selection"], slot["key"], team)

    with st.container(border=True):
        st.markdown(f"**{slot['label']}**")
        if slot.get("description"):
            st.caption(slot["description"])

        if assignment:
            item = assignment["item"]
            owned = assignment.get("inventory_id") is not None
            badge = t("slot.owned") if owned else t("slot.catalog")
            st.markdown(f"{item.get('name')}  \n`{badge}`")
        else:
            item = get_default_slot_skin(slot["key"], team) or {}
            st.caption(f"{t('slot.default')}: {item.get('name', '-')}")

        image_url = get_image_url(item) if item else None
        if image_url:
            st.image(image_url, width="stretch")

        with st.expander(t("slot.change")):
            render_slot_picker(slot, team, state, catalog)
            if assignment and st.button(t("slot.clear"), key=f"clear_{slot['key']}_{team}"):
                set_state(clear_assignment(state, slot["key"], team))
                st.rerun()


def generate_loadout_export(state, name):
    """Generate exportable loadout data in JSON and Markdown formats."""
    entries = flatten_selection(state["selection"])
    exported_at = datetime.now()

    json_data = {
        "exported_at": exported_at.isoformat(),
        "name": name,
        "entries": entries,
        "pending_choices": len(state["pending"]),
    }

    md_lines = [
        f"# {name or 'Loadout'}",
        f"*Exported: {exported_at.strftime('%Y-%m-%d %H:%M')}*",
        "",
    ]
    for team in (TEAM_CT, TEAM_T):
        team_entries = [e for e in entries if e["team"] == team]
        if not team_entries:
            continue
        md_lines.extend([
            f"## {team} Side",
            "| Slot | Skin | Source |",
            "|------|------|--------|",
        ])
        for entry in team_entries:
            source = "Inventory" if entry["inventoryItemId"] is not None else "Catalog"
            label = get_slot(entry["slotKey"])["label"]
            md_lines.append(f"| {label} | {entry['skinName']} | {source} |")
        md_lines.append("")

    return json_data, "\n".join(md_lines)


def save_loadout(user_id, name, loadout_id=None):
    state = get_state()
    entries = flatten_selection(state["selection"])
    if not name.strip():
        set_notice("error", t("saved.name_required"))
        return
    if not entries:
        set_notice("warning", t("saved.empty"))
        return

    payload = {"userId": user_id, "name": name.strip(), "entries": entries}
    if loadout_id:
        payload["id"] = loadout_id
    try:
        skin_api.upsert_loadout(payload)
    except Exception as e:
        set_notice("error", f"{t('saved.failed_save')}: {e}")
        return
    set_notice("success", t("saved.saved", name=name.strip()))


def render_saved_loadouts(user_id):
    st.sidebar.markdown("---")
    st.sidebar.header(f"💾 {t('saved.header')}")

    try:
        loadouts = skin_api.fetch_loadouts(user_id)
    except Exception as e:
        st.sidebar.warning(f"{t('saved.failed_load')}: {e}")
        loadouts = []

    name = st.sidebar.text_input(t("saved.name"), placeholder=t("saved.placeholder"), key="loadout_name")

    for index, loadout in enumerate(loadouts[:MAX_SAVED_LOADOUTS]):
        entry_count = len(loadout.get("entries") or [])
        with st.sidebar.expander(f"{t('saved.slot', number=index + 1)}: {loadout['name']} ({entry_count})"):
            col1, col2, col3 = st.columns(3)
            if col1.button(t("saved.load"), key=f"load_{loadout['id']}"):
                entries = list(get_state()["entries"].values())
                set_state(state_from_loadout(loadout, entries))
                set_notice("success", t("saved.loaded", name=loadout["name"]))
                st.rerun()
            if col2.button(t("saved.overwrite"), key=f"overwrite_{loadout['id']}"):
                save_loadout(user_id, name or loadout["name"], loadout["id"])
                st.rerun()
            if col3.button("🗑️", key=f"delete_{loadout['id']}", help=t("saved.delete")):
                try:
                    skin_api.delete_loadout(loadout["id"])
                except Exception as e:
                    set_notice("error", f"{t('saved.failed_delete')}: {e}")
                st.rerun()

    if len(loadouts) < MAX_SAVED_LOADOUTS:
        if st.sidebar.button(t("saved.save_new", number=len(loadouts) + 1), width="stretch"):
            save_loadout(user_id, name)
            st.rerun()
    else:
        st.sidebar.caption(t("saved.full", max=MAX_SAVED_LOADOUTS))


def render_summary(state):
    selection = state["selection"]

    st.subheader(t("summary.coverage"))
    coverage_df = pd.DataFrame(coverage_summary(selection))
    chart = alt.Chart(coverage_df).mark_bar().encode(
        x=alt.X("section:N", title=None, sort=[s["title"] for s in LOADOUT_SECTIONS]),
        xOffset="team:N",
        y=alt.Y("filled:Q", title=t("summary.filled")),
        color=alt.Color("team:N", scale=alt.Scale(domain=[TEAM_CT, TEAM_T], range=["#3B82F6", "#F59E0B"])),
        tooltip=["section", "team", "filled", "total"],
    )
    st.altair_chart(chart, width="stretch")

    entries = flatten_selection(selection)
    if not entries:
        st.info(t("summary.empty"))
        return

    st.subheader(t("summary.entries"))
    entries_df = pd.DataFrame(entries)[["team", "slotKey", "skinName", "weapon", "inventoryItemId"]]
    st.dataframe(entries_df, hide_index=True, width="stretch")

    if state["ledger"]:
        with st.expander(t("summary.ledger")):
            ledger_df = pd.DataFrame(
                [
                    {
                        "inventory_id": inventory_id,
                        "name": state["entries"][inventory_id]["item"]["name"] if inventory_id in state["entries"] else "",
                        "used": used,
                        "max": state["entries"][inventory_id]["max_usage"] if inventory_id in state["entries"] else None,
                    }
                    for inventory_id, used in sorted(state["ledger"].items())
                ]
            )
            st.dataframe(ledger_df, hide_index=True, width="stretch")

    st.markdown("---")
    st.subheader(t("export.header"))
    name = st.session_state.get("loadout_name") or "loadout"
    json_data, markdown_text = generate_loadout_export(state, name)
    file_stem = name.replace(" ", "_")

    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            label=f"📥 {t('export.download_json')}",
            data=json.dumps(json_data, indent=2),
            file_name=f"{file_stem}.json",
            mime="application/json",
        )
    with col2:
        st.download_button(
            label=f"📥 {t('export.download_markdown')}",
            data=markdown_text,
            file_name=f"{file_stem}.md",
            mime="text/markdown",
        )


def main():
    logger.debug("Streamlit app main() started")

    with st.sidebar:
        language_selector(label="🌐 Language")
        st.markdown("---")

    st.title(f"🔪 {t('app.title')}")
    st.markdown(t("app.subtitle"))

    with st.status(t("status.loading"), expanded=False) as status:
        try:
            catalog = load_catalog()
            status.update(label=t("status.loaded", skins=len(catalog)), state="complete")
        except Exception as e:
            status.update(label=t("status.failed_load"), state="error")
            st.error(f"{t('status.failed_load')}: {e}")
            st.stop()

    # Sidebar: player and side
    st.sidebar.header(f"👤 {t('sidebar.player')}")
    user_id = int(st.sidebar.number_input(t("sidebar.user_id"), min_value=1, value=1, step=1))
    active_team = st.sidebar.radio(
        t("sidebar.team"),
        [TEAM_CT, TEAM_T],
        format_func=team_label,
        horizontal=True,
    )

    if st.sidebar.button(f"🎒 {t('sidebar.equip')}", type="primary", width="stretch", help=t("sidebar.equip_help")):
        run_auto_equip(user_id)

    if st.sidebar.checkbox(t("sidebar.verbose_log"), value=False, key="verbose_log"):
        enable_verbose_log()

    render_saved_loadouts(user_id)

    show_notice()

    state = get_state()
    if has_pending(state):
        render_pending_choice(state)
        st.markdown("---")

    tab_loadout, tab_summary = st.tabs([
        f"🧰 {t('tabs.loadout')}",
        f"📊 {t('tabs.summary')}",
    ])

    with tab_loadout:
        for section in LOADOUT_SECTIONS:
            slots = [slot for slot in section["slots"] if active_team in teams_for_slot(slot)]
            if not slots:
                continue
            st.subheader(section["title"])
            st.caption(t("tabs.slot_count", count=len(slots)))
            cols = st.columns(SLOT_COLUMNS)
            for index, slot in enumerate(slots):
                with cols[index % SLOT_COLUMNS]:
                    render_slot_card(slot, active_team, state, catalog)

    with tab_summary:
        render_summary(state)


if __name__ == "__main__":
    main()
