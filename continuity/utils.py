"""
Shared utility functions for the wardrobe continuity engine.

Consolidates the JSON file helpers used by the settings loader, the backup
loader and the command line, plus the small value-coercion helpers the
adapter and the backup loader both need.

All JSON writes use atomic temp-file-then-os.replace() so a report is never
left half-written.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# JSON I/O (atomic writes)
# ---------------------------------------------------------------------------

# Returned by read_json_document() when a file is missing or unparseable,
# so callers can tell "unreadable" apart from a legitimate JSON null.
UNREADABLE = object()


def read_json_document(path, default=UNREADABLE):
    """Parse the JSON document at *path*.

    A missing file, invalid JSON or an undecodable file gives *default*
    (``UNREADABLE`` unless told otherwise).  The backup loader and the
    settings loader both turn that into their own humanized error.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No JSON document at %s", path)
        return default
    except (UnicodeDecodeError, OSError):
        logger.debug("Could not read %s", path, exc_info=True)
        return default

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        logger.debug("Invalid JSON in %s: %s", path, exc)
        return default


def write_json_report(path, data, *, indent=2):
    """Write *data* to *path* as pretty JSON, replacing any previous file.

    The document goes to a sibling temp file first and is moved into place
    with ``os.replace()``, so a reader never sees half a report.  Missing
    parent directories are created.
    """
    target = Path(path).resolve()
    target.parent.mkdir(parents=True, exist_ok=True)

    handle, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=target.name, suffix=".tmp")
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=indent, ensure_ascii=False)
            fh.write("\n")
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------

def coerce_label(value):
    """Turn a chapter/scene value into a trimmed string, or ``None``.

    Chapters are stored as either numbers or strings.  ``5`` and ``5.0``
    both become ``"5"`` so they land in the same scene bucket; ``None``,
    booleans and blank strings mean "absent".
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def document_id(value):
    """Extract a string id from a reference value.

    Accepts a plain id (``"abc"`` or ``12``), an extended-JSON object id
    (``{"$oid": "abc"}``) or a populated document carrying ``_id``/``id``.
    Returns ``None`` when no id can be found.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (str, int)):
        return coerce_label(value)
    if isinstance(value, dict):
        if "$oid" in value:
            return document_id(value["$oid"])
        for key in ("_id", "id"):
            if key in value:
                return document_id(value[key])
    return None
