"""Tests for command payload resolution."""

import pytest

from lightsync.models.base import Capability, CapabilitySet, ColorMode
from lightsync.models.light import LightState
from lightsync.resolver import normalize_payload, parse_number, parse_on, resolve_command

COLOR = CapabilitySet.of(Capability.COLOR)
WHITE = CapabilitySet.of()
INFRARED = CapabilitySet.of(Capability.COLOR, Capability.INFRARED)


@pytest.fixture
def state() -> LightState:
    return LightState(on=True, hue=0, saturation=100, brightness=100, kelvin=3500)


class TestParsing:
    """Tests for scalar parsing helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [(5, 5.0), (2.5, 2.5), ("42", 42.0), (" 7.5 ", 7.5), ("abc", None),
         (True, None), (None, None), (float("nan"), None), (float("inf"), None), ("inf", None)],
    )
    def test_parse_number(self, value, expected):
        assert parse_number(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [(True, True), (False, False), (1, True), (0, False), ("true", True), ("false", False),
         ("on", True), ("OFF", False), ("1", True), ("0", False), ("maybe", None), (None, None)],
    )
    def test_parse_on(self, value, expected):
        assert parse_on(value, current=False) == expected

    def test_parse_on_toggle(self):
        assert parse_on("toggle", current=True) is False
        assert parse_on("Toggle", current=False) is True

    @pytest.mark.parametrize(
        "payload,expected",
        [(True, {"on": True}), ("off", {"on": "off"}), ("toggle", {"on": "toggle"}),
         (50, {"on": True, "brightness": 50.0}), ("25", {"on": True, "brightness": 25.0})],
    )
    def test_normalize_scalars(self, payload, expected):
        assert normalize_payload(payload) == expected

    @pytest.mark.parametrize("payload", [None, [1, 2, 3], "dim", float("nan")])
    def test_normalize_unhandled(self, payload):
        assert normalize_payload(payload) is None


class TestColor:
    """Tests for hue/rgb/hex resolution."""

    def test_hex(self, state):
        delta = resolve_command({"hex": "#123456"}, state, COLOR).delta
        assert (delta.hue, delta.saturation, delta.brightness) == (210, 79, 34)
        assert delta.mode is ColorMode.COLOR

    def test_rgb_channels(self, state):
        delta = resolve_command({"red": 0x12, "green": 0x34, "blue": 0x56}, state, COLOR).delta
        assert (delta.hue, delta.saturation, delta.brightness) == (210, 79, 34)

    def test_rgb_list(self, state):
        delta = resolve_command({"rgb": [0x12, 0x34, 0x56]}, state, COLOR).delta
        assert (delta.hue, delta.saturation, delta.brightness) == (210, 79, 34)

    def test_single_channel_starts_from_current_color(self, state):
        """Only the supplied channel changes, clamped to 255."""
        delta = resolve_command({"green": 0xFFF}, state, COLOR).delta
        assert (delta.hue, delta.saturation, delta.brightness) == (60, 100, 100)

    def test_negative_channel_clamped(self, state):
        delta = resolve_command({"blue": -1}, state, COLOR).delta
        assert (delta.hue, delta.saturation, delta.brightness) == (0, 100, 100)

    def test_hue(self, state):
        delta = resolve_command({"hue": 123}, state, COLOR).delta
        assert delta.hue == 123
        assert delta.saturation == 100

    @pytest.mark.parametrize("hue", [360, 359.6, 400])
    def test_hue_stays_below_360(self, state, hue):
        """Hue that clamps or rounds to 360 is stored as 0."""
        delta = resolve_command({"hue": hue}, state, COLOR).delta
        assert delta.hue == 0
        assert state.merge(delta).hue == 0

    def test_hue_takes_precedence(self, state):
        delta = resolve_command({"hue": 90, "hex": "#0000ff"}, state, COLOR).delta
        assert delta.hue == 90

    def test_invalid_hue_falls_back_to_hex(self, state):
        resolution = resolve_command({"hue": "abc", "hex": "#0000ff"}, state, COLOR)
        assert resolution.delta.hue == 240
        assert resolution.rejected == ["hue"]

    @pytest.mark.parametrize("key", ["sat", "saturation"])
    def test_saturation(self, state, key):
        delta = resolve_command({key: 33}, state, COLOR).delta
        assert (delta.hue, delta.saturation, delta.brightness) == (0, 33, 100)

    def test_sat_wins_over_saturation(self, state):
        delta = resolve_command({"sat": 10, "saturation": 90}, state, COLOR).delta
        assert delta.saturation == 10

    def test_saturation_clamped(self, state):
        delta = resolve_command({"saturation": 150}, state, COLOR).delta
        assert delta.saturation == 100

    def test_saturation_overrides_hex(self, state):
        delta = resolve_command({"hex": "#ff0000", "sat": 50}, state, COLOR).delta
        assert (delta.hue, delta.saturation) == (0, 50)

    def test_invalid_hex_rejected(self, state):
        resolution = resolve_command({"hex": "#12"}, state, COLOR)
        assert resolution.delta.is_empty
        assert resolution.is_invalid

    def test_boolean_is_not_a_number(self, state):
        resolution = resolve_command({"hue": True}, state, COLOR)
        assert resolution.delta.hue is None
        assert resolution.is_invalid


class TestNoColorCapability:
    """Lights without color only take the brightness implied by a color."""

    def test_hue_without_brightness_change(self, state):
        resolution = resolve_command({"hue": 200}, state, WHITE)
        assert resolution.delta.is_empty
        assert not resolution.is_invalid
        assert not resolution.is_unhandled

    def test_color_extracts_brightness(self, state):
        delta = resolve_command({"hex": "#123456"}, state, WHITE).delta
        assert delta.brightness == 34
        assert delta.hue is None
        assert delta.saturation is None
        assert delta.mode is None


class TestTemperature:
    """Tests for kelvin and mired resolution."""

    @pytest.mark.parametrize(
        "payload",
        [{"kelvin": 3000}, {"ct": 1000000 / 3000}, {"mired": 1000000 / 3000},
         {"mirek": 1000000 / 3000}, {"kelvin": "3000"}],
    )
    def test_equivalent_units(self, state, payload):
        delta = resolve_command(payload, state, COLOR).delta
        assert delta.kelvin == 3000
        assert delta.mode is ColorMode.TEMPERATURE

    def test_kelvin_clamped(self, state):
        assert resolve_command({"kelvin": 20000}, state, COLOR).delta.kelvin == 10000
        assert resolve_command({"kelvin": 100}, state, COLOR).delta.kelvin == 2000

    def test_mired_clamped_before_conversion(self, state):
        assert resolve_command({"ct": 50}, state, COLOR).delta.kelvin == 10000
        assert resolve_command({"ct": 1000}, state, COLOR).delta.kelvin == 2000

    def test_mired_wins_over_kelvin(self, state):
        assert resolve_command({"ct": 250, "kelvin": 6500}, state, COLOR).delta.kelvin == 4000

    def test_color_mode_wins_when_both_given(self, state):
        delta = resolve_command({"hue": 10, "kelvin": 3000}, state, COLOR).delta
        assert delta.kelvin == 3000
        assert delta.mode is ColorMode.COLOR

    def test_white_light_accepts_temperature(self, state):
        assert resolve_command({"kelvin": 2700}, state, WHITE).delta.kelvin == 2700


class TestBrightness:
    """Tests for brightness resolution."""

    @pytest.mark.parametrize("payload", [{"bri": 33}, {"brightness": 33}, {"brightness": "33"}])
    def test_brightness_keys(self, state, payload):
        delta = resolve_command(payload, state, COLOR).delta
        assert delta.brightness == 33
        assert delta.mode is None

    def test_bri_wins(self, state):
        assert resolve_command({"bri": 10, "brightness": 90}, state, COLOR).delta.brightness == 10

    def test_brightness_clamped(self, state):
        assert resolve_command({"brightness": 150}, state, COLOR).delta.brightness == 100
        assert resolve_command({"bri": -3}, state, COLOR).delta.brightness == 0

    def test_brightness_layers_on_color(self, state):
        delta = resolve_command({"hex": "#ff0000", "bri": 20}, state, COLOR).delta
        assert (delta.hue, delta.saturation, delta.brightness) == (0, 100, 20)

    def test_number_payload(self, state):
        delta = resolve_command(50, state, COLOR).delta
        assert delta.on is True
        assert delta.brightness == 50

    def test_non_numeric_string(self, state):
        resolution = resolve_command({"brightness": "bright"}, state, COLOR)
        assert resolution.is_invalid
        assert resolution.rejected == ["brightness"]


class TestPower:
    """Tests for on/off resolution."""

    @pytest.mark.parametrize(
        "payload", [False, "off", {"on": False}, {"on": "false"}, {"on": 0}, {"on": "off"}]
    )
    def test_off(self, state, payload):
        assert resolve_command(payload, state, COLOR).delta.on is False

    @pytest.mark.parametrize(
        "payload", [True, "on", {"on": True}, {"on": "true"}, {"on": 1}, {"on": "on"}]
    )
    def test_on(self, state, payload):
        state.on = False
        assert resolve_command(payload, state, COLOR).delta.on is True

    @pytest.mark.parametrize("payload", ["toggle", {"on": "toggle"}, "TOGGLE"])
    def test_toggle_flips(self, state, payload):
        assert resolve_command(payload, state, COLOR).delta.on is False
        state.on = False
        assert resolve_command(payload, state, COLOR).delta.on is True

    def test_invalid_on(self, state):
        resolution = resolve_command({"on": "sometimes"}, state, COLOR)
        assert resolution.is_invalid


class TestInfrared:
    """Tests for maxIR resolution."""

    def test_max_ir(self, state):
        delta = resolve_command({"maxIR": 40}, state, INFRARED).delta
        assert delta.max_ir == 40
        assert not delta.has_light_changes

    def test_max_ir_clamped(self, state):
        assert resolve_command({"maxIR": 150}, state, INFRARED).delta.max_ir == 100

    def test_max_ir_without_capability(self, state):
        resolution = resolve_command({"maxIR": 40}, state, COLOR)
        assert resolution.delta.is_empty
        assert not resolution.is_invalid
        assert not resolution.is_unhandled


class TestResolution:
    """Tests for unhandled input and duration."""

    @pytest.mark.parametrize(
        "payload", [{"foo": 1}, {}, None, [1, 2], "dim", {"duration": 1000}, object()]
    )
    def test_unhandled(self, state, payload):
        resolution = resolve_command(payload, state, COLOR)
        assert resolution.is_unhandled
        assert resolution.delta.is_empty

    @pytest.mark.parametrize(
        "duration,expected", [(5000, 5000), ("1500", 1500), (-5, 0), ("slow", 0), (None, 0)]
    )
    def test_duration(self, state, duration, expected):
        resolution = resolve_command({"bri": 10, "duration": duration}, state, COLOR)
        assert resolution.duration == expected

    def test_resolution_does_not_mutate_state(self, state):
        resolve_command({"hex": "#123456", "on": False}, state, COLOR)
        assert state == LightState(on=True, hue=0, saturation=100, brightness=100, kelvin=3500)
