from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from ghexpr.exceptions import ConfigError
from ghexpr.logging import get_logger

__all__ = [
    "GhExprConfig",
    "load_config",
    "get_user_config_path",
    "PROJECT_CONFIG_NAME",
]

logger = get_logger(__name__)

PROJECT_CONFIG_NAME = "ghexpr.yaml"


class YamlConfigSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from YAML files."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | None = None,
    ):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._config_data: dict[str, Any] = {}
        if yaml_file and yaml_file.exists():
            try:
                with open(yaml_file) as f:
                    loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(
                    message=f"Invalid YAML in {yaml_file}: {e}",
                    field=None,
                    value=None,
                ) from e
            if loaded is None:
                logger.warning("config_file_empty", path=str(yaml_file))
            elif not isinstance(loaded, dict):
                raise ConfigError(
                    message=f"Config file {yaml_file} must contain a mapping",
                    field=None,
                    value=loaded,
                )
            else:
                self._config_data = loaded

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get value for a specific field from the YAML config."""
        if field_name in self._config_data:
            return self._config_data[field_name], field_name, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return the complete config data."""
        return self._config_data


class GhExprConfig(BaseSettings):
    """Settings for the ghexpr command-line host.

    Attributes:
        max_depth: Nesting limit for parsed expressions.
        context_file: Default YAML/JSON context snapshot for ``eval``.
        workspace: Directory ``hashFiles()`` resolves patterns against.
        status: Job status reported to ``success()``/``failure()``/``cancelled()``.
        verbosity: Log level for the CLI.
    """

    model_config = SettingsConfigDict(
        env_prefix="GHEXPR_",
        extra="ignore",
    )

    max_depth: int = Field(default=64, ge=1, le=200)
    context_file: Path | None = None
    workspace: Path | None = None
    status: Literal["success", "failure", "cancelled"] = "success"
    verbosity: Literal["error", "warning", "info", "debug"] = "warning"

    @field_validator("workspace")
    @classmethod
    def check_workspace_exists(cls, v: Path | None) -> Path | None:
        """Warn if the workspace directory doesn't exist."""
        if v is not None and not v.is_dir():
            logger.warning("workspace_missing", workspace=str(v))
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
        """Customize the order of settings sources.

        Priority (highest to lowest):
        1. Environment variables (GHEXPR_*)
        2. Explicit config file (passed to the constructor by load_config)
        3. Project YAML config (./ghexpr.yaml)
        4. User YAML config (~/.config/ghexpr/config.yaml)

        Note: pydantic-settings processes sources from left to right,
        with earlier sources having higher priority.
        """
        user_config_path = get_user_config_path()
        project_config_path = Path.cwd() / PROJECT_CONFIG_NAME

        return (
            env_settings,
            init_settings,
            YamlConfigSource(settings_cls, project_config_path),
            YamlConfigSource(settings_cls, user_config_path),
        )


def get_user_config_path() -> Path:
    """Get the path to the user configuration file.

    Returns:
        Path to ~/.config/ghexpr/config.yaml
    """
    return Path.home() / ".config" / "ghexpr" / "config.yaml"


def load_config(config_path: Path | None = None) -> GhExprConfig:
    """Load configuration with hierarchy: user -> project -> file -> env.

    Args:
        config_path: Optional explicit config file; its values override the
            project and user files but not environment variables.

    Returns:
        GhExprConfig instance with merged configuration

    Raises:
        ConfigError: If a config file is missing, malformed, or invalid
    """
    explicit: dict[str, Any] = {}
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(
                message=f"Config file not found: {config_path}",
                field=None,
                value=str(config_path),
            )
        explicit = YamlConfigSource(GhExprConfig, config_path)()

    try:
        return GhExprConfig(**explicit)
    except ValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(loc) for loc in first_error["loc"])
        raise ConfigError(
            message=f"Invalid configuration: {first_error['msg']}",
            field=field,
            value=first_error.get("input"),
        ) from e
