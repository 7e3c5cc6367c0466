# src/lawkeeper/core/config.py
"""
Configuration schema and loading for lawkeeper.

Uses Pydantic for validation and pydantic-settings for LAWKEEPER_*
environment overrides. Settings are frozen (immutable) after construction.
"""

import os
import re
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

# Upper bound on trials per law; law evaluation must terminate
MAX_TRIAL_COUNT = 10_000

# Prefix for environment overrides
ENV_PREFIX = "LAWKEEPER_"


class BypassRule(BaseModel):
    """Explicit allow-list entry for skipping law verification.

    Both patterns are regular expressions matched with fullmatch: contract
    against the contract name, type against the qualified type name
    ('list', 'shapes.Point').

    Example YAML:
        bypass:
          - contract: "Functor"
            type: "shapes\\..*"
            reason: "tree generator not written yet"
    """

    model_config = {"frozen": True}

    contract: str = Field(default=".*", description="Regex for contract names")
    type: str = Field(default=".*", description="Regex for qualified type names")
    reason: str = Field(min_length=1, description="Why verification is skipped (shown in the bypass warning)")

    @field_validator("contract", "type")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid regular expression {v!r}: {e}") from e
        return v

    def matches(self, contract: str, qualified_type: str) -> bool:
        return re.fullmatch(self.contract, contract) is not None and re.fullmatch(self.type, qualified_type) is not None


class VerificationSettings(BaseModel):
    """How laws are exercised at binding time.

    Example YAML:
        verification:
          trial_count: 200
          max_seed: 50
          deadline_ms: 500
    """

    model_config = {"frozen": True}

    trial_count: int = Field(
        default=100,
        gt=0,
        le=MAX_TRIAL_COUNT,
        description="Generated trials per law",
    )
    max_seed: int = Field(
        default=100,
        ge=0,
        description="Largest seed handed to generators (bounds size and magnitude)",
    )
    deadline_ms: float | None = Field(
        default=None,
        gt=0,
        description="Per-trial wall clock guard; exceeding it reports LawTimeoutError",
    )
    random_seed: int | None = Field(
        default=None,
        description="Seed for trial generation. None runs derandomized (same trials every run)",
    )
    bypass: tuple[BypassRule, ...] = Field(
        default=(),
        description="(contract, type) patterns whose bindings skip law verification",
    )

    def bypass_rule_for(self, contract: str, qualified_type: str) -> BypassRule | None:
        """First bypass rule matching the pair, if any."""
        for rule in self.bypass:
            if rule.matches(contract, qualified_type):
                return rule
        return None


class LoggingSettings(BaseModel):
    """Logging output configuration."""

    model_config = {"frozen": True}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO", description="Root log level")
    json_output: bool = Field(default=False, description="Emit JSON lines instead of console output")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v


class LawkeeperSettings(BaseSettings):
    """Top-level lawkeeper configuration.

    All sections have defaults, so LawkeeperSettings() is a valid
    configuration for programmatic use. LAWKEEPER_* environment variables
    (LAWKEEPER_VERIFICATION__TRIAL_COUNT for nested keys) take precedence
    over keyword arguments, and so over values loaded from a file.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
        frozen=True,
    )

    verification: VerificationSettings = Field(
        default_factory=VerificationSettings,
        description="Law verification configuration",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )
    plugins: tuple[str, ...] = Field(
        default=(),
        description="Importable modules registered as contract plugins",
    )

    @field_validator("plugins")
    @classmethod
    def validate_plugin_paths(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        for path in v:
            if not all(part.isidentifier() for part in path.split(".")):
                raise ValueError(f"Plugin '{path}' is not a dotted module path")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment first: LAWKEEPER_* overrides the settings file
        return (env_settings, init_settings)


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values.

    Args:
        config: Configuration dict (may contain nested structures)

    Returns:
        New dict with environment variables expanded
    """

    def _expand_string(value: str) -> str:
        def replacer(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default = match.group(2)  # None if no default specified
            env_value = os.environ.get(var_name)
            if env_value is not None:
                return env_value
            if default is not None:
                return default
            # No env var and no default - keep original (validation will complain)
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(replacer, value)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _expand_string(value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def load_settings(config_path: Path) -> LawkeeperSettings:
    """Load settings from YAML file with environment variable overrides.

    Precedence:
    1. Environment variables (LAWKEEPER_*) - highest priority
    2. Config file (lawkeeper.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: LAWKEEPER_VERIFICATION__TRIAL_COUNT for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated LawkeeperSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If the file is not valid YAML
        ValueError: If the file is not a YAML mapping
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    loaded = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    # Empty file means "all defaults"
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config file {config_path} must be a YAML mapping, got {type(loaded).__name__}")

    # Env overrides are layered on by LawkeeperSettings itself
    return LawkeeperSettings(**_expand_env_vars(loaded))
