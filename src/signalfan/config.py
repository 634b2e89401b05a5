# src/signalfan/config.py
"""
Configuration schema and loading for signalfan dispatchers.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from signalfan.links import DEFAULT_REDIRECT_DELAY


class ClientSettings(BaseModel):
    """One client to instantiate and register.

    Example YAML:
        clients:
          - name: debug_error
            options:
              default_level: warn
    """

    model_config = {"frozen": True}

    name: str = Field(description="Registry name of a discoverable client (debug_analytics, debug_error, ...)")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="Client-specific configuration options",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("client name must not be empty")
        return v


class DispatcherSettings(BaseModel):
    """Top-level dispatcher configuration."""

    model_config = {"frozen": True}

    clients: tuple[ClientSettings, ...] = Field(
        default=(),
        description="Clients registered when the dispatcher is created, in order",
    )
    isolate_client_failures: bool = Field(
        default=False,
        description="Log and skip a failing client instead of propagating its error",
    )
    redirect_delay_seconds: float = Field(
        default=DEFAULT_REDIRECT_DELAY,
        ge=0,
        description="Default delay before link-click navigation",
    )

    @field_validator("clients")
    @classmethod
    def validate_unique_names(cls, v: tuple[ClientSettings, ...]) -> tuple[ClientSettings, ...]:
        seen: set[str] = set()
        duplicates: list[str] = []
        for client in v:
            if client.name in seen:
                duplicates.append(client.name)
            seen.add(client.name)
        if duplicates:
            raise ValueError(f"Duplicate client names: {sorted(set(duplicates))}")
        return v


def load_settings(config_path: Path) -> DispatcherSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (SIGNALFAN_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: SIGNALFAN_ISOLATE_CLIENT_FAILURES=true.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated DispatcherSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="SIGNALFAN",
        settings_files=[str(config_path)],
        environments=False,  # No [default]/[production] sections
        load_dotenv=False,  # Don't auto-load .env
        merge_enabled=True,  # Deep merge nested dicts
    )

    # Dynaconf returns uppercase keys; convert to lowercase for Pydantic
    # Also filter out internal Dynaconf settings
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return DispatcherSettings(**raw_config)
