"""Tests for the immutable settings snapshot and its clamping rules."""

import pytest

from config import DEFAULT_SETTINGS, Settings, SettingsError, random_seed


class TestUpdateClamping:
    @pytest.mark.parametrize("value,expected", [(1, 4), (4, 4), (20, 20), (36, 36), (99, 36)])
    def test_array_size(self, value, expected):
        assert DEFAULT_SETTINGS.update("array_size", value).array_size == expected

    @pytest.mark.parametrize("value,expected", [(10, 120), (650, 650), (5000, 2000)])
    def test_step_delay(self, value, expected):
        assert DEFAULT_SETTINGS.update("step_delay", value).step_delay == expected

    def test_min_value_kept_below_max(self):
        s = DEFAULT_SETTINGS.update("min_value", 200)
        assert s.min_value == DEFAULT_SETTINGS.max_value - 2

    def test_range_updated_as_a_pair(self):
        s = DEFAULT_SETTINGS.update_many({"min_value": 95, "max_value": 200})
        assert (s.min_value, s.max_value) == (95, 200)
        s = DEFAULT_SETTINGS.update_many({"maxValue": -20, "minValue": -40})
        assert (s.min_value, s.max_value) == (-40, -20)

    def test_pair_still_keeps_the_gap(self):
        s = DEFAULT_SETTINGS.update_many({"min_value": 50, "max_value": 10})
        assert (s.min_value, s.max_value) == (50, 52)

    def test_max_value_kept_above_min(self):
        s = DEFAULT_SETTINGS.update("max_value", -5)
        assert s.max_value == DEFAULT_SETTINGS.min_value + 2

    @pytest.mark.parametrize("value,expected", [(123456, 23456), (-42, 42), (7.9, 7), ("15", 15)])
    def test_seed_wraps(self, value, expected):
        assert DEFAULT_SETTINGS.update("seed", value).seed == expected

    def test_camel_case_keys(self):
        s = DEFAULT_SETTINGS.update("loopOnComplete", True)
        assert s.loop_on_complete is True

    def test_bool_strings(self):
        assert DEFAULT_SETTINGS.update("auto_play", "false").auto_play is False

    def test_variant(self):
        assert DEFAULT_SETTINGS.update("variant", "recursive").variant == "recursive"

    def test_returns_new_snapshot(self):
        s = DEFAULT_SETTINGS.update("array_size", 8)
        assert s is not DEFAULT_SETTINGS
        assert DEFAULT_SETTINGS.array_size == 12


class TestUpdateErrors:
    def test_unknown_key(self):
        with pytest.raises(SettingsError):
            DEFAULT_SETTINGS.update("theme", "dark")

    @pytest.mark.parametrize("value", ["abc", None, float("nan"), float("inf"), True])
    def test_non_numeric(self, value):
        with pytest.raises(SettingsError):
            DEFAULT_SETTINGS.update("array_size", value)

    def test_huge_integer_is_rejected(self):
        with pytest.raises(SettingsError):
            DEFAULT_SETTINGS.update("seed", 10 ** 400)
        with pytest.raises(SettingsError):
            DEFAULT_SETTINGS.update_many({"max_value": -10 ** 400})

    def test_bad_variant(self):
        with pytest.raises(SettingsError):
            DEFAULT_SETTINGS.update("variant", "ternary")

    def test_bad_bool(self):
        with pytest.raises(SettingsError):
            DEFAULT_SETTINGS.update("ease_motion", "maybe")

    def test_is_a_value_error(self):
        assert issubclass(SettingsError, ValueError)


class TestSerialisation:
    def test_round_trip(self):
        s = DEFAULT_SETTINGS.update_many({"array_size": 20, "variant": "recursive", "seed": 5})
        assert Settings.from_dict(s.to_dict()) == s

    def test_round_trip_keeps_raised_range(self):
        s = Settings(min_value=95, max_value=200)
        assert Settings.from_dict(s.to_dict()) == s

    def test_from_dict_fills_defaults(self):
        assert Settings.from_dict({"arraySize": 8}) == DEFAULT_SETTINGS.update("array_size", 8)

    def test_from_dict_ignores_bad_entries(self, caplog):
        s = Settings.from_dict({"array_size": "lots", "theme": "dark", "seed": 3})
        assert s == DEFAULT_SETTINGS.update("seed", 3)
        assert "Ignoring stored setting" in caplog.text

    def test_from_none(self):
        assert Settings.from_dict(None) == DEFAULT_SETTINGS


class TestDerived:
    def test_restart_delay(self):
        assert DEFAULT_SETTINGS.restart_delay_ms == 160
        assert DEFAULT_SETTINGS.update("ease_motion", True).restart_delay_ms == 80

    def test_random_seed_range(self):
        for _ in range(20):
            assert 1000 <= random_seed() <= 90999
