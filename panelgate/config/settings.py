"""Root settings model for panelgate configuration.

Settings are layered from code defaults, config/default.toml, the
{PANELGATE_ENV}.toml overlay and PANELGATE_* environment variables.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from panelgate.config.models.coordination import CoordinatorConfig
from panelgate.config.models.observability import ObservabilityConfig
from panelgate.config.models.providers import ProvidersConfig
from panelgate.config.models.storage import StorageConfig
from panelgate.exceptions import ConfigurationError

CONFIG_DIR_ENV = "PANELGATE_CONFIG_DIR"
ENVIRONMENT_ENV = "PANELGATE_ENV"
DEFAULT_ENVIRONMENT = "development"

# TOML config handed to the custom settings source
_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Set the TOML configuration to be used by Settings."""
    global _toml_config
    _toml_config = config


def config_dir() -> Path:
    """Locate the directory holding default.toml.

    Returns:
        PANELGATE_CONFIG_DIR if set, else the nearest config/ directory in
        the working directory or one of its four parents, else ./config

    Raises:
        FileNotFoundError: If PANELGATE_CONFIG_DIR points nowhere
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    current = Path.cwd()
    for directory in (current, *list(current.parents)[:4]):
        candidate = directory / "config"
        if candidate.is_dir():
            return candidate
    return Path("config")


def environment() -> str:
    """Name of the TOML overlay to apply (PANELGATE_ENV, default development)."""
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)


def _merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overlay.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as f:
        data = tomllib.load(f)

    unknown = sorted(set(data) - set(Settings.model_fields))
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration section(s) in {path.name}: {', '.join(unknown)}"
        )
    return data


def load_toml_config(directory: Path | None = None, env: str | None = None) -> dict[str, Any]:
    """Read default.toml and deep-merge the environment overlay over it.

    Args:
        directory: Config directory; located with config_dir() if omitted
        env: Overlay name; read from PANELGATE_ENV if omitted. A missing
            overlay file is skipped.

    Returns:
        Merged configuration dictionary for TomlConfigSettingsSource

    Raises:
        FileNotFoundError: If default.toml is missing
        tomllib.TOMLDecodeError: If a file is not valid TOML
        ConfigurationError: If a file has a top-level key Settings does not
            define, which would otherwise be silently ignored
    """
    directory = directory or config_dir()
    env = env or environment()

    default_path = directory / "default.toml"
    if not default_path.is_file():
        raise FileNotFoundError(
            f"Default configuration file not found: {default_path}. "
            f"Create config/default.toml or set {CONFIG_DIR_ENV}."
        )
    config = _read_toml(default_path)

    overlay_path = directory / f"{env}.toml"
    if overlay_path.is_file():
        config = _merge(config, _read_toml(overlay_path))
    return config


class TomlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings source that reads from the loaded TOML configuration."""

    def get_field_value(
        self, field: Any, field_name: str  # noqa: ARG002
    ) -> tuple[Any, str, bool]:
        value = _toml_config.get(field_name)
        return value, field_name, value is not None

    def __call__(self) -> dict[str, Any]:
        return _toml_config.copy()


class Settings(BaseSettings):
    """Root configuration object.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/default.toml (base configuration)
    3. config/{PANELGATE_ENV}.toml (environment overrides)
    4. PANELGATE_* environment variables (runtime overrides)
    """

    model_config = SettingsConfigDict(
        env_prefix="PANELGATE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="panelgate", description="Application name for logging")
    debug: bool = Field(default=False, description="Enable debug mode")

    coordination: CoordinatorConfig = Field(
        default_factory=CoordinatorConfig,
        description="Idempotency, credit and fallback timing",
    )
    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Coordination store backend",
    )
    providers: ProvidersConfig = Field(
        default_factory=ProvidersConfig,
        description="Image provider configuration",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority (highest first): init args, PANELGATE_* env vars, TOML."""
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )
