"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  - CLI flags passed by Click
  2. Env vars     - ``HONEYCOMB_*`` prefix, ``__`` for nesting
                    (``HONEYCOMB_PROFILE__PATH=/tmp/0.xml``)
  3. TOML file    - ``honeycomb.toml`` located by :func:`find_config`
  4. Code defaults - baked into the section models
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from honeycomb.config.discovery import find_config
from honeycomb.config.models import CatalogueConfig, ProfileConfig
from honeycomb.domain.catalogue import PolicyCatalogue

# Tables a honeycomb.toml may contain.
TOML_SECTIONS = ("profile", "catalogue")


def load_toml(path: Path) -> dict[str, Any]:
    """Parse *path*, rejecting anything but the known sections.

    Raises:
        click.ClickException: Unreadable file, bad TOML, or a stray key.
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise click.ClickException(f"Cannot read {path}: {exc.strerror or exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise click.ClickException(f"Invalid TOML in {path}: {exc}") from exc

    unknown = sorted(set(data) - set(TOML_SECTIONS))
    if unknown:
        expected = ", ".join(f"[{s}]" for s in TOML_SECTIONS)
        msg = f"Unknown key(s) {', '.join(unknown)} in {path}; expected {expected}"
        raise click.ClickException(msg)
    return data


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by one ``honeycomb.toml``."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data = load_toml(toml_path) if toml_path is not None else {}

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# The file from_cli chose; read by settings_customise_sources.
_toml_path: ContextVar[Path | None] = ContextVar("honeycomb_toml_path", default=None)


class HoneycombSettings(BaseSettings):
    """Settings for one honeycomb invocation, frozen after construction.

    Attributes:
        config_path: The ``honeycomb.toml`` that was loaded, if any.
        profile: ``[profile]``: default profile path and backup policy.
        catalogue: ``[catalogue]``: container override and extra rules.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "HONEYCOMB_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    profile: ProfileConfig = Field(default_factory=ProfileConfig)
    catalogue: CatalogueConfig = Field(default_factory=CatalogueConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, _toml_path.get()),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> HoneycombSettings:
        """Construct settings from a CLI invocation.

        An explicit *config_path* must exist; without one the file is
        discovered from *start* (default: the working directory).
        """
        if config_path:
            toml_path: Path | None = Path(config_path)
            if not toml_path.is_file():
                raise click.ClickException(f"Config file not found: {config_path}")
        else:
            toml_path = find_config(start)

        token = _toml_path.set(toml_path)
        try:
            return cls(config_path=toml_path, **cli_flags)
        finally:
            _toml_path.reset(token)

    def policy_catalogue(self) -> PolicyCatalogue:
        """The default catalogue with configured overrides applied."""
        return self.catalogue.build()
