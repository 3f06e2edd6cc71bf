import json
from pathlib import Path

import pytest

from oculo.channels import ColorChannel
from oculo.settings import (
    ColorTheme,
    DecoderSettings,
    HeifLimits,
    Limit,
    PersistentSettings,
    VolatileSettings,
)
from oculo.shortcuts import InputEvent


def test_persistent_defaults():
    s = PersistentSettings()
    assert s.accent_color == (255, 0, 75)
    assert s.background_color == (30, 30, 30)
    assert s.max_cache == 30
    assert s.title_format == "{APP} | {VERSION} | {FULLPATH}"
    assert s.theme is ColorTheme.Dark
    assert s.min_window_size == (100, 100)
    assert s.wrap_folder is True


def test_persistent_round_trip_through_disk(tmp_path):
    s = PersistentSettings(max_cache=5, theme=ColorTheme.Light, zen_mode=True)
    s.shortcuts[InputEvent.Quit] = frozenset({"LControl", "W"})
    s.save_blocking(tmp_path)
    loaded = PersistentSettings.load(tmp_path)
    assert loaded == s


def test_current_channel_not_persisted():
    s = PersistentSettings(current_channel=ColorChannel.Red)
    data = s.to_dict()
    assert "current_channel" not in data
    assert PersistentSettings.from_dict(data).current_channel is ColorChannel.Rgba


def test_missing_keys_use_defaults():
    s = PersistentSettings.from_dict({"vsync": False})
    assert s.vsync is False
    assert s == PersistentSettings(vsync=False)


def test_unknown_shortcut_event_rejected():
    with pytest.raises(ValueError):
        PersistentSettings.from_dict({"shortcuts": {"NoSuchEvent": ["X"]}})


def test_bad_color_rejected():
    with pytest.raises(ValueError):
        PersistentSettings.from_dict({"accent_color": [1, 2]})


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        PersistentSettings.load(tmp_path)


def test_saved_file_is_json(tmp_path):
    path = PersistentSettings().save_blocking(tmp_path / "sub")
    data = json.loads(path.read_text())
    assert data["theme"] == "Dark"
    assert data["shortcuts"]["CompareNext"] == ["C", "LShift"]


def test_limit_str():
    assert str(Limit.default()) == ""
    assert str(Limit.no_limit()) == "0"
    assert str(Limit.u64(42)) == "42"
    assert str(Limit.u32(7)) == "7"


@pytest.mark.parametrize(
    "limit", [Limit.default(), Limit.no_limit(), Limit.u64(2**40), Limit.u32(9)]
)
def test_limit_json_round_trip(limit):
    assert Limit.from_json(limit.to_json()) == limit


def test_limit_json_form():
    assert Limit.no_limit().to_json() == "NoLimit"
    assert Limit.u32(9).to_json() == {"U32": 9}


def test_limit_range_checked():
    with pytest.raises(ValueError):
        Limit.u32(2**32)
    with pytest.raises(ValueError):
        Limit.from_json({"Bogus": 1})


def test_decoder_settings_round_trip():
    d = DecoderSettings(heif=HeifLimits(items=Limit.u32(3), override_all=True))
    assert DecoderSettings.from_dict(d.to_dict()) == d


def test_maybe_limits_maps_kinds():
    limits = HeifLimits(
        image_size_pixels=Limit.u64(1000),
        items=Limit.no_limit(),
        components=Limit.u64(5),  # wrong width: decoder default kept
    )
    env = {}
    result = limits.maybe_limits(env)
    assert result == {"image_size_pixels": 1000, "items": 0}
    assert env["LIBHEIF_SECURITY_LIMITS"] == "on"


def test_maybe_limits_override_from_settings():
    env = {}
    assert HeifLimits(override_all=True).maybe_limits(env) is None
    assert env["LIBHEIF_SECURITY_LIMITS"] == "off"


def test_maybe_limits_env_decides_once():
    env = {"LIBHEIF_SECURITY_LIMITS": "ON"}
    limits = HeifLimits()
    assert limits.maybe_limits(env) is None
    # The variable now reads "off", yet the first decision stays.
    assert limits.maybe_limits(env) is None


def test_volatile_defaults():
    v = VolatileSettings()
    assert v.encoding_options[0] == {"Jpg": {"quality": 75}}
    assert v.encoding_options[-1] == "Bmp"
    assert v.window_geometry == ((0, 0), (0, 0))


def test_volatile_round_trip(tmp_path):
    v = VolatileSettings(
        favourite_images={Path("/a/b.png")},
        recent_images=[Path("/x.jpg"), Path("/y.jpg")],
        window_geometry=((10, 20), (800, 600)),
        last_open_directory=Path("/pics"),
        folder_bookmarks={Path("/pics"), Path("/more")},
    )
    v.save_blocking(tmp_path)
    assert VolatileSettings.load(tmp_path) == v