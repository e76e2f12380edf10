"""
continuity/config.py -- Checker settings.

Settings live in a small JSON file::

    {"parallel": true, "max_workers": 8, "sort_input": true}

Lookup order for ``load_settings()``:

    1. The explicit ``path`` argument.
    2. The ``WARDROBE_CONTINUITY_SETTINGS`` environment variable.
    3. ``settings.json`` in the platform user-config directory
       (via platformdirs).

A settings file that does not exist gives the defaults.  A file that exists
but is unreadable or invalid raises ``SettingsError``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from platformdirs import user_config_dir
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from continuity.utils import UNREADABLE, read_json_document

logger = logging.getLogger(__name__)

_APP_NAME = "WardrobeContinuity"
_APP_AUTHOR = "WardrobeContinuity"
SETTINGS_ENV_VAR = "WARDROBE_CONTINUITY_SETTINGS"


class SettingsError(ValueError):
    """Raised when a settings file exists but cannot be used."""


class CheckerSettings(BaseModel):
    """Tunable behaviour of ``TimelineConsistencyChecker``.

    Attributes
    ----------
    parallel : bool
        Run the detectors (and one item-conflict task per scene) on a
        thread pool.  The report is identical either way.
    max_workers : int
        Thread pool size when ``parallel`` is on.
    sort_input : bool
        Sort hydrated backup entries by chapter and scene before checking.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    parallel: bool = False
    max_workers: int = Field(default=4, ge=1)
    sort_input: bool = False


def default_settings_path() -> Path:
    """Return the platform-appropriate default settings file path."""
    return Path(user_config_dir(_APP_NAME, _APP_AUTHOR)) / "settings.json"


def _humanize_errors(exc: ValidationError) -> str:
    lines = []
    for i, err in enumerate(exc.errors(), 1):
        field = " -> ".join(str(part) for part in err.get("loc", ())) or "(root)"
        if err.get("type") == "extra_forbidden":
            lines.append(f"  {i}. '{field}' is not a known setting.")
        else:
            lines.append(f"  {i}. '{field}': {err.get('msg', 'invalid value')}")
    return "\n".join(lines)


def load_settings(path: Optional[str | os.PathLike] = None) -> CheckerSettings:
    """Load ``CheckerSettings`` from *path* (or the default locations)."""
    if path is None:
        path = os.environ.get(SETTINGS_ENV_VAR) or default_settings_path()
    path = Path(path)

    if not path.exists():
        logger.debug("No settings file at %s, using defaults", path)
        return CheckerSettings()

    data = read_json_document(path)
    if data is UNREADABLE or not isinstance(data, dict):
        raise SettingsError(
            f"The settings file '{path}' could not be read. It must contain a "
            f"JSON object such as {{\"parallel\": true}}."
        )

    try:
        settings = CheckerSettings.model_validate(data)
    except ValidationError as exc:
        raise SettingsError(
            f"The settings file '{path}' has some problems:\n{_humanize_errors(exc)}"
        ) from exc

    logger.debug("Loaded settings from %s: %s", path, settings)
    return settings
