import pytest

from oculo.shortcuts import (
    InputEvent,
    KeyboardState,
    add_key,
    add_keys,
    alphanumeric,
    default_keys,
    is_key_modifier,
    key_pressed,
    keypresses_as_markdown,
    keypresses_as_string,
    lookup,
    modifiers,
)


@pytest.fixture
def shortcuts():
    return default_keys("linux")


def test_is_key_modifier():
    assert is_key_modifier("LShift")
    assert is_key_modifier("LControl")
    assert not is_key_modifier("C")
    assert not is_key_modifier("Right")


def test_modifiers_and_alphanumeric_partition():
    keys = frozenset({"LShift", "LControl", "C", "Right"})
    mods = modifiers(keys)
    alpha = alphanumeric(keys)
    assert mods == {"LShift", "LControl"}
    assert alpha == {"C", "Right"}
    assert mods | alpha == keys
    assert not mods & alpha


def test_default_keys_covers_every_event_but_browse_has_combo(shortcuts):
    assert set(shortcuts) == set(InputEvent)
    assert shortcuts[InputEvent.Quit] == {"Q"}
    assert shortcuts[InputEvent.Browse] == {"LControl", "O"}


def test_default_keys_ordered_like_enum(shortcuts):
    assert list(shortcuts) == list(InputEvent)


def test_default_keys_macos_uses_win():
    mac = default_keys("darwin")
    assert mac[InputEvent.Copy] == {"LWin", "C"}
    assert all("LControl" not in keys for keys in mac.values())


def test_add_key_returns_new_mapping(shortcuts):
    updated = add_key(shortcuts, InputEvent.Quit, "Escape")
    assert updated[InputEvent.Quit] == {"Escape"}
    assert shortcuts[InputEvent.Quit] == {"Q"}


def test_add_keys_replaces_binding():
    updated = add_keys({}, InputEvent.Paste, ["LControl", "V"])
    assert updated == {InputEvent.Paste: frozenset({"LControl", "V"})}


def test_lookup_missing_is_none():
    assert lookup({}, InputEvent.Quit) == "None"


def test_lookup_orders_modifiers_first(shortcuts):
    text = lookup(shortcuts, InputEvent.CompareNext)
    assert text.split(" + ") == ["LShift", "C"]


def test_keypresses_as_string_roundtrip():
    keys = frozenset({"X", "LShift", "A", "LAlt"})
    parts = keypresses_as_string(keys).split(" + ")
    assert set(parts) == keys
    assert parts[:2] == sorted(modifiers(keys))


def test_keypresses_as_markdown():
    md = keypresses_as_markdown(frozenset({"C", "LShift"}))
    assert md == "<kbd>LShift</kbd> + <kbd>C</kbd>"


def test_key_pressed_simple(shortcuts):
    kb = KeyboardState(down={"Q"}, pressed={"Q"})
    assert key_pressed(kb, shortcuts, InputEvent.Quit)


def test_key_grab_blocks(shortcuts):
    kb = KeyboardState(down={"Q"}, pressed={"Q"})
    assert not key_pressed(kb, shortcuts, InputEvent.Quit, key_grab=True)


def test_nothing_down_is_false(shortcuts):
    assert not key_pressed(KeyboardState(), shortcuts, InputEvent.Quit)


def test_single_modifier_is_false(shortcuts):
    kb = KeyboardState(down={"LShift"}, pressed={"LShift"})
    assert not key_pressed(kb, shortcuts, InputEvent.CompareNext)


def test_combination_matches_only_full_combo(shortcuts):
    kb = KeyboardState(down={"LShift", "C"}, pressed={"C"})
    assert key_pressed(kb, shortcuts, InputEvent.CompareNext)
    assert not key_pressed(kb, shortcuts, InputEvent.RGBAChannel)


def test_missing_modifier_is_false(shortcuts):
    kb = KeyboardState(down={"LShift", "O"}, pressed={"O"})
    assert not key_pressed(kb, shortcuts, InputEvent.Browse)


def test_fullscreen_on_release(shortcuts):
    kb = KeyboardState(released={"F"})
    assert key_pressed(kb, shortcuts, InputEvent.Fullscreen)
    kb_pressed = KeyboardState(down={"F"}, pressed={"F"})
    assert not key_pressed(kb_pressed, shortcuts, InputEvent.Fullscreen)


def test_repeating_keys_fire_while_held(shortcuts):
    held = KeyboardState(down={"Right"})
    assert key_pressed(held, shortcuts, InputEvent.NextImage)
    held_q = KeyboardState(down={"Q"})
    assert not key_pressed(held_q, shortcuts, InputEvent.Quit)


def test_missing_command_inserts_default():
    table = {}
    kb = KeyboardState(down={"Q"}, pressed={"Q"})
    assert not key_pressed(kb, table, InputEvent.Quit)
    assert table[InputEvent.Quit] == default_keys()[InputEvent.Quit]