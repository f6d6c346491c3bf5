"""
Internationalization (i18n) for the Loadout Cooker UI.

Usage:
    from i18n import t, team_label, language_selector

    st.title(t("app.title"))
    st.success(t("equip.resolved", count=12))
    st.caption(team_label("CT"))
"""

import json
import os
import sys
from functools import lru_cache

import streamlit as st

# Available languages with display names (native)
LANGUAGES = {
    "en": "English",
    "de": "Deutsch",
}

DEFAULT_LANGUAGE = "en"

# Handle PyInstaller bundle paths
if getattr(sys, "frozen", False):
    LOCALES_DIR = os.path.join(sys._MEIPASS, "locales")
else:
    LOCALES_DIR = os.path.join(os.path.dirname(__file__), "locales")


@lru_cache(maxsize=len(LANGUAGES))
def _load_translations(lang: str) -> dict:
    file_path = os.path.join(LOCALES_DIR, f"{lang}.json")
    if not os.path.exists(file_path):
        file_path = os.path.join(LOCALES_DIR, f"{DEFAULT_LANGUAGE}.json")

    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def _lookup(translations: dict, key: str):
    """Walk a nested dict by dot-notation key. None when any part is missing."""
    value = translations
    for part in key.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def get_language() -> str:
    """Get current language from session state."""
    if "language" not in st.session_state:
        st.session_state.language = DEFAULT_LANGUAGE
    return st.session_state.language


def set_language(lang: str) -> None:
    if lang in LANGUAGES:
        st.session_state.language = lang


def t(key: str, **kwargs) -> str:
    """
    Get translated string by dot-notation key.

    Falls back to the default language, then to the key itself.

    Examples:
        t("app.title")                     # "Loadout Cooker"
        t("equip.partial", pending=3)      # "3 slots need your pick"
    """
    lang = get_language()
    value = _lookup(_load_translations(lang), key)
    if value is None and lang != DEFAULT_LANGUAGE:
        value = _lookup(_load_translations(DEFAULT_LANGUAGE), key)
    if value is None:
        return key

    if kwargs and isinstance(value, str):
        try:
            return value.format(**kwargs)
        except KeyError:
            return value
    return value


def team_label(team: str) -> str:
    """Localized side name for CT / T / Both."""
    return t(f"teams.{team.lower()}")


def language_selector(
    label: str = "Language",
    key: str = "lang_selector",
    clear_on_change: list = None,
) -> str:
    """
    Render a language selector widget.

    Args:
        label: Label for the selectbox
        key: Streamlit widget key
        clear_on_change: Session state keys to drop when the language changes

    Returns:
        Selected language code
    """
    current = get_language()
    options = list(LANGUAGES.keys())

    selected = st.selectbox(
        label,
        options=options,
        index=options.index(current) if current in options else 0,
        format_func=lambda x: LANGUAGES.get(x, x),
        key=key,
    )

    if selected != current:
        set_language(selected)
        for state_key in clear_on_change or []:
            st.session_state.pop(state_key, None)
        st.rerun()

    return selected
