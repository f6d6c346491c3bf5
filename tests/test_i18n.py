import pytest

import i18n


def _keys(tree, prefix=""):
    for key, value in tree.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            yield from _keys(value, f"{path}.")
        else:
            yield path


@pytest.mark.parametrize("lang", sorted(i18n.LANGUAGES))
def test_locales_define_the_same_keys(lang):
    reference = set(_keys(i18n._load_translations(i18n.DEFAULT_LANGUAGE)))
    assert set(_keys(i18n._load_translations(lang))) == reference


def test_lookup_walks_nested_keys():
    translations = {"pending": {"header": "Select {slot}"}}
    assert i18n._lookup(translations, "pending.header") == "Select {slot}"
    assert i18n._lookup(translations, "pending.missing") is None
    assert i18n._lookup(translations, "pending.header.deeper") is None


def test_team_keys_exist():
    translations = i18n._load_translations(i18n.DEFAULT_LANGUAGE)
    for team in ("ct", "t", "both"):
        assert i18n._lookup(translations, f"teams.{team}")
