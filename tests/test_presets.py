import pytest

from imgcmp.presets import (
    CompareParams,
    DiffStyle,
    PixelAllowance,
    get_preset,
    iter_presets,
    parse_allowance,
    parse_color,
    parse_threshold,
)


def test_get_preset_is_case_insensitive():
    assert get_preset("EXACT").params.threshold == 0.0
    assert get_preset("tolerant").params.threshold == pytest.approx(0.02)


def test_unknown_preset_lists_choices():
    with pytest.raises(KeyError, match="exact"):
        get_preset("fuzzy")


def test_iter_presets_names():
    assert {preset.name for preset in iter_presets()} == {"exact", "tolerant", "loose"}


def test_preset_to_dict():
    data = get_preset("loose").to_dict()
    assert data["params"] == {"threshold": 0.05, "allowance": "0.1%"}
    assert data["style"]["mode"] == "highlight"


def test_params_copy_overrides():
    params = CompareParams().copy(threshold=0.5)
    assert params.threshold == 0.5
    assert params.allowance == PixelAllowance(0)


@pytest.mark.parametrize(
    "value, expected",
    [("0", 0.0), ("0.25", 0.25), ("1", 1.0)],
)
def test_parse_threshold(value, expected):
    assert parse_threshold(value) == expected


@pytest.mark.parametrize("value", ["-0.1", "1.01", "abc"])
def test_parse_threshold_rejects(value):
    with pytest.raises(ValueError):
        parse_threshold(value)


def test_parse_allowance_absolute():
    allowance = parse_allowance("12")
    assert allowance == PixelAllowance(12)
    assert allowance.resolve(100, 100) == 12
    assert str(allowance) == "12"


def test_parse_allowance_percentage():
    allowance = parse_allowance("2.5%")
    assert allowance.is_ratio
    assert allowance.resolve(20, 20) == 10
    assert str(allowance) == "2.5%"


@pytest.mark.parametrize("value", ["-1", "1.5", "x%", "150%"])
def test_parse_allowance_rejects(value):
    with pytest.raises(ValueError):
        parse_allowance(value)


def test_parse_color():
    assert parse_color("#00ff7f") == (0, 255, 127)
    assert parse_color("1, 2, 3") == (1, 2, 3)
    assert parse_color("") is None
    assert parse_color(None) is None


@pytest.mark.parametrize("value", ["#fff", "#gggggg", "1,2", "256,0,0"])
def test_parse_color_rejects(value):
    with pytest.raises(ValueError):
        parse_color(value)


def test_style_overrides_keep_unset_fields():
    style = DiffStyle(dim=0.6).with_overrides(mode="error")
    assert style.mode == "error"
    assert style.dim == 0.6
    assert style.highlight == (255, 0, 0)


def test_style_rejects_bad_dim():
    with pytest.raises(ValueError):
        DiffStyle(dim=2.0)


@pytest.mark.parametrize("highlight", [(300, 0, 0), (0, -1, 0), (255, 0)])
def test_style_rejects_bad_highlight(highlight):
    with pytest.raises(ValueError):
        DiffStyle(highlight=highlight)
