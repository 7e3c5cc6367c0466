# tests/unit/core/test_config.py
"""Tests for settings models, YAML loading and LAWKEEPER_* environment overrides."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from lawkeeper.core.config import (
    MAX_TRIAL_COUNT,
    BypassRule,
    LawkeeperSettings,
    LoggingSettings,
    VerificationSettings,
    load_settings,
)


class TestVerificationSettings:
    def test_defaults(self) -> None:
        settings = VerificationSettings()
        assert settings.trial_count == 100
        assert settings.max_seed == 100
        assert settings.deadline_ms is None
        assert settings.random_seed is None
        assert settings.bypass == ()

    @pytest.mark.parametrize("trial_count", [0, -1, MAX_TRIAL_COUNT + 1])
    def test_trial_count_bounds(self, trial_count: int) -> None:
        with pytest.raises(ValidationError):
            VerificationSettings(trial_count=trial_count)

    def test_deadline_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            VerificationSettings(deadline_ms=0)

    def test_settings_are_frozen(self) -> None:
        settings = VerificationSettings()
        with pytest.raises(ValidationError):
            settings.trial_count = 5  # type: ignore[misc]

    def test_first_matching_bypass_rule_wins(self) -> None:
        settings = VerificationSettings(
            bypass=(
                BypassRule(contract="Functor", type=r"shapes\..*", reason="no tree generator"),
                BypassRule(reason="everything else"),
            )
        )
        assert settings.bypass_rule_for("Functor", "shapes.Tree").reason == "no tree generator"  # type: ignore[union-attr]
        assert settings.bypass_rule_for("Monoid", "list").reason == "everything else"  # type: ignore[union-attr]


class TestBypassRule:
    def test_fullmatch(self) -> None:
        rule = BypassRule(contract="Mon.*", type="list", reason="legacy")
        assert rule.matches("Monoid", "list")
        assert not rule.matches("Monoid", "list2")
        assert not rule.matches("XMonoid", "list")

    def test_invalid_regex_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BypassRule(contract="(", reason="broken")

    def test_reason_required(self) -> None:
        with pytest.raises(ValidationError):
            BypassRule(contract="Monoid", reason="")


class TestLawkeeperSettings:
    def test_all_sections_default(self) -> None:
        settings = LawkeeperSettings()
        assert settings.verification == VerificationSettings()
        assert settings.logging == LoggingSettings()
        assert settings.plugins == ()

    def test_log_level_normalized(self) -> None:
        assert LoggingSettings(level="debug").level == "DEBUG"  # type: ignore[arg-type]

    def test_plugin_paths_validated(self) -> None:
        with pytest.raises(ValidationError):
            LawkeeperSettings(plugins=("not a module",))


class TestLoadSettings:
    """YAML file loading with environment overrides layered on top."""

    def test_load_from_yaml_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
verification:
  trial_count: 25
  max_seed: 10
  deadline_ms: 250
  bypass:
    - contract: "Functor"
      type: ".*Tree"
      reason: "generator cannot build trees yet"
logging:
  level: debug
plugins:
  - "tests.fixtures.plugins"
""")
        settings = load_settings(config_file)

        assert settings.verification.trial_count == 25
        assert settings.verification.max_seed == 10
        assert settings.verification.deadline_ms == 250
        assert settings.verification.bypass[0].reason == "generator cannot build trees yet"
        assert settings.logging.level == "DEBUG"
        assert settings.plugins == ("tests.fixtures.plugins",)

    def test_load_with_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
verification:
  trial_count: 25
""")
        # Environment variable should override YAML
        monkeypatch.setenv("LAWKEEPER_VERIFICATION__TRIAL_COUNT", "7")

        settings = load_settings(config_file)
        assert settings.verification.trial_count == 7

    def test_env_var_expansion(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
logging:
  level: "${LK_TEST_LEVEL:-warning}"
""")
        assert load_settings(config_file).logging.level == "WARNING"

        monkeypatch.setenv("LK_TEST_LEVEL", "error")
        assert load_settings(config_file).logging.level == "ERROR"

    def test_load_validates_schema(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("""
verification:
  trial_count: 0
""")
        with pytest.raises(ValidationError):
            load_settings(config_file)

    def test_load_missing_file_raises_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "nonexistent.yaml")

    def test_env_override_creates_nested_section(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("plugins: []\n")
        monkeypatch.setenv("LAWKEEPER_LOGGING__JSON_OUTPUT", "true")
        monkeypatch.setenv("LAWKEEPER_VERIFICATION__DEADLINE_MS", "50")

        settings = load_settings(config_file)
        assert settings.logging.json_output is True
        assert settings.verification.deadline_ms == 50

    def test_empty_file_means_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("")
        assert load_settings(config_file) == LawkeeperSettings()

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="must be a YAML mapping"):
            load_settings(config_file)


class TestEnvironmentOverrides:
    def test_env_applies_without_a_file(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LAWKEEPER_VERIFICATION__MAX_SEED", "12")
        monkeypatch.setenv("LAWKEEPER_LOGGING__LEVEL", "debug")

        settings = LawkeeperSettings()
        assert settings.verification.max_seed == 12
        assert settings.logging.level == "DEBUG"

    def test_env_wins_over_keyword_arguments(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LAWKEEPER_VERIFICATION__TRIAL_COUNT", "3")

        settings = LawkeeperSettings(verification={"trial_count": 40, "max_seed": 9})  # type: ignore[arg-type]
        assert settings.verification.trial_count == 3
        assert settings.verification.max_seed == 9

    def test_env_list_parsed_as_json(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LAWKEEPER_PLUGINS", '["tests.fixtures.plugins"]')
        assert LawkeeperSettings().plugins == ("tests.fixtures.plugins",)

    def test_invalid_env_value_fails_validation(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LAWKEEPER_VERIFICATION__TRIAL_COUNT", "0")
        with pytest.raises(ValidationError):
            LawkeeperSettings()

    def test_unprefixed_variables_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VERIFICATION__TRIAL_COUNT", "3")
        assert LawkeeperSettings().verification.trial_count == 100
