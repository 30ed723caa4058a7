"""TaskNavSettings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs   (CLI flags passed by Click)
  2. Env vars      (``TASKNAV_*``; ``__`` separates nested keys, as in
     ``TASKNAV_REVEAL__SCROLL_SETTLE_MS``)
  3. TOML file     (``tasknav.toml``, see :mod:`tasknav.config.discovery`)
  4. Code defaults (the section models)
"""

from __future__ import annotations

import logging
import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from tasknav.config.discovery import find_config
from tasknav.config.models import LocatorConfig, RevealConfig

logger = logging.getLogger(__name__)

TOML_SECTIONS = frozenset({"reveal", "locator"})


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source over the ``[reveal]`` and ``[locator]`` tables.

    Unknown top-level keys are logged and dropped; CLI-only flags
    cannot be set from TOML.
    """

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path is None:
            return
        try:
            raw = tomllib.loads(toml_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {toml_path}: {exc}"
            raise click.ClickException(msg) from exc

        for key, value in raw.items():
            if key in TOML_SECTIONS:
                self._data[key] = value
            else:
                logger.warning("Ignoring unknown key %r in %s", key, toml_path)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for the TOML path during construction.
_tls = threading.local()


class TaskNavSettings(BaseSettings):
    """Frozen settings shared by the CLI and the navigation services.

    Attributes:
        config_path: The TOML file that was loaded, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "TASKNAV_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    no_color: bool = False

    # --- TOML sections ---
    reveal: RevealConfig = Field(default_factory=RevealConfig)
    locator: LocatorConfig = Field(default_factory=LocatorConfig)

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
            TomlSettingsSource(settings_cls, getattr(_tls, "toml_path", None)),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> TaskNavSettings:
        """Construct settings from a CLI invocation.

        An explicit *config_path* must name an existing file. Without
        one, ``tasknav.toml`` is discovered from *start* (default: cwd).
        """
        if config_path:
            toml_path: Path | None = Path(config_path)
            if not toml_path.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
        else:
            toml_path = find_config(start)

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None
