"""Tests for the store and mutation engine."""

import dataclasses

import pytest

from accessibility_engine.core.config_model import DEFAULT_CONFIG_RECORD, TOGGLE_FIELDS
from accessibility_engine.core.exceptions import UnknownFieldError, UnknownProfileError
from accessibility_engine.core.mutation_engine import MutationEngine
from accessibility_engine.core.profiles import ProfileCatalog
from accessibility_engine.core.store import ConfigStore
from accessibility_engine.utils.constants import (
    AccessibilityProfile,
    ColorBlindMode,
    PROFILE_FEEDBACK_PATTERN,
    TOGGLE_FEEDBACK_PATTERN,
)
from accessibility_engine.utils.logger import LogCapture

PRESETS = [p for p in AccessibilityProfile if p is not AccessibilityProfile.NONE]


@pytest.fixture
def store():
    return ConfigStore()


@pytest.fixture
def mutations(store, haptics):
    return MutationEngine(store, haptics)


class TestStore:
    """Tests for ConfigStore."""

    def test_notifies_on_change(self, store):
        seen = []
        store.subscribe(seen.append)
        new = store.update(lambda c: ProfileCatalog.build("motor"))
        assert seen == [new]

    def test_same_snapshot_is_not_a_change(self, store):
        seen = []
        store.subscribe(seen.append)
        store.commit(store.config)
        assert seen == []

    def test_unsubscribe(self, store):
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        store.commit(ProfileCatalog.build("motor"))
        assert seen == []

    def test_failing_listener_does_not_block_others(self, store):
        seen = []

        def broken(config):
            raise RuntimeError("boom")

        store.subscribe(broken)
        store.subscribe(seen.append)
        with LogCapture() as capture:
            store.commit(ProfileCatalog.build("motor"))

        assert len(seen) == 1
        assert any("Config listener failed" in m for m in capture.get_messages())


class TestToggle:
    """Tests for MutationEngine.toggle."""

    @pytest.mark.parametrize("field", sorted(TOGGLE_FIELDS))
    def test_flips_exactly_one_field(self, store, mutations, field):
        store.commit(ProfileCatalog.build("idoso"))
        before = mutations.config
        after = mutations.toggle(field)

        assert after is not before
        assert getattr(after, field) is not getattr(before, field)
        assert after == dataclasses.replace(before, **{field: not getattr(before, field)})

    def test_toggle_twice_restores_value(self, mutations):
        mutations.toggle("big_cursor")
        assert mutations.toggle("big_cursor").big_cursor is False

    def test_unknown_field(self, mutations):
        with pytest.raises(UnknownFieldError):
            mutations.toggle("font_size")

    def test_keeps_active_profile(self, mutations):
        mutations.activate_profile("motor")
        assert mutations.toggle("line_focus").active_profile is AccessibilityProfile.MOTOR

    def test_enabling_vibration_pulses(self, mutations, haptics):
        mutations.toggle("adaptive_vibration")
        assert haptics.pulses == [TOGGLE_FEEDBACK_PATTERN]

        mutations.toggle("adaptive_vibration")
        assert haptics.pulses == [TOGGLE_FEEDBACK_PATTERN]

    def test_other_toggles_do_not_pulse(self, mutations, haptics):
        mutations.toggle("captions")
        assert haptics.pulses == []


class TestSetters:
    """Tests for set_enum, set_number and font steps."""

    def test_set_enum_accepts_string(self, mutations):
        config = mutations.set_enum("color_blindness", "tritanopia")
        assert config.color_blindness is ColorBlindMode.TRITANOPIA

    def test_set_enum_rejects_unknown_value(self, mutations):
        with pytest.raises(ValueError):
            mutations.set_enum("color_blindness", "ultraviolet")

    def test_set_enum_rejects_non_enum_field(self, mutations):
        with pytest.raises(UnknownFieldError):
            mutations.set_enum("font_size", "large")

    def test_set_number_clamps(self, mutations):
        assert mutations.set_number("brightness", 5).brightness == 20
        assert mutations.set_number("volume", 250).volume == 100
        assert mutations.set_number("tts_speed", 1.5).tts_speed == 1.5

    def test_font_size_never_leaves_range(self, mutations):
        for _ in range(20):
            mutations.increase_font_size()
        assert mutations.config.font_size == 200

        for _ in range(30):
            mutations.decrease_font_size()
        assert mutations.config.font_size == 70

    def test_font_step_is_ten(self, mutations):
        assert mutations.increase_font_size().font_size == 110
        assert mutations.decrease_font_size().font_size == 100

    def test_apply_changes(self, mutations):
        config = mutations.apply_changes({"line_focus": True, "spacing": "wide"})
        assert config.line_focus is True
        assert config.spacing.value == "wide"


class TestActivateProfile:
    """Tests for profile switching."""

    def test_activation_builds_from_defaults(self, mutations):
        mutations.toggle("hide_images")
        mutations.set_number("volume", 20)
        config = mutations.activate_profile("dislexia")
        assert config == ProfileCatalog.build("dislexia")

    @pytest.mark.parametrize("profile", PRESETS)
    def test_double_activation_returns_defaults(self, mutations, profile):
        mutations.toggle("captions")
        mutations.activate_profile(profile)
        assert mutations.activate_profile(profile) == DEFAULT_CONFIG_RECORD

    def test_switching_profiles_leaves_nothing_behind(self, mutations):
        mutations.activate_profile("baixa_visao")
        config = mutations.activate_profile("auditivo")
        assert config == ProfileCatalog.build("auditivo")
        assert config.font_size == 100

    def test_activation_pulses_pattern(self, mutations, haptics):
        mutations.activate_profile("idoso")
        assert haptics.pulses == [PROFILE_FEEDBACK_PATTERN]

    def test_deactivation_does_not_pulse(self, mutations, haptics):
        mutations.activate_profile("idoso")
        mutations.activate_profile("idoso")
        assert haptics.pulses == [PROFILE_FEEDBACK_PATTERN]

    def test_none_resets(self, mutations):
        mutations.activate_profile("motor")
        assert mutations.activate_profile("none") == DEFAULT_CONFIG_RECORD

    def test_unknown_profile(self, mutations):
        with pytest.raises(UnknownProfileError):
            mutations.activate_profile("astronaut")


class TestResetAndMerge:
    """Tests for reset and snapshot merging."""

    def test_reset(self, mutations):
        mutations.activate_profile("epilepsia")
        mutations.toggle("captions")
        assert mutations.reset() is DEFAULT_CONFIG_RECORD

    def test_merge_overwrites_matching_keys_only(self, mutations):
        mutations.toggle("big_cursor")
        config = mutations.merge({"fontSize": 180, "unknownKey": 1})
        assert config.font_size == 180
        assert config.big_cursor is True
