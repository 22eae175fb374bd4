import pytest

from src.motions import (
    LEGACY_PROMPTS,
    MOTIONS,
    build_motion_prompt,
    css_keyframes,
    get_motion,
    motion_catalog,
    stylesheet,
)


def test_five_presets_in_ui_order():
    assert [m.id for m in MOTIONS] == ["earthquake", "sidewinder", "drunk", "mosquito", "liquid"]
    assert get_motion("drunk").name == "DRUNK TILT"
    assert get_motion("nope") is None
    assert get_motion(None) is None


def test_prompt_for_preset_and_legacy_ids():
    assert build_motion_prompt("earthquake") == get_motion("earthquake").prompt
    assert build_motion_prompt("shake") == LEGACY_PROMPTS["shake"]
    assert "no text overlays" in build_motion_prompt("liquid")


def test_unknown_motion_falls_back_to_subtle_zoom():
    assert build_motion_prompt("breakdance") == LEGACY_PROMPTS["subtle-zoom"]
    assert build_motion_prompt("") == LEGACY_PROMPTS["subtle-zoom"]
    assert build_motion_prompt(None) == LEGACY_PROMPTS["subtle-zoom"]


def test_css_keyframes_spans_zero_to_hundred():
    css = css_keyframes("earthquake")
    assert css.startswith("@keyframes shake-earthquake {")
    assert "0% { transform: translate(0px, 0px) rotate(0deg) scale(1); }" in css
    assert "100% { transform: translate(0px, 0px)" in css
    assert "translate(0px, -8px)" in css

    with pytest.raises(KeyError):
        css_keyframes("breakdance")


def test_stylesheet_and_catalog_cover_every_preset():
    css = stylesheet()
    catalog = motion_catalog()
    assert len(catalog) == 5
    for entry in catalog:
        assert f".motion-{entry['id']} " in css
        assert entry["animation"] == f"shake-{entry['id']}"
