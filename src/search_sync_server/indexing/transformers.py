"""
Field Transformers

Pure value converters applied to a single field value before it is written
into a search document. Field definitions refer to transformers by name so
that schemas stay plain data.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

from bs4 import BeautifulSoup


_WHITESPACE = re.compile(r"\s+")

# Formats the host emits besides ISO-8601 (date pickers store Ymd).
_DATE_FORMATS = ("%Y%m%d", "%d/%m/%Y", "%Y-%m-%d %H:%M:%S")
_DATE_ONLY_FORMATS = ("%Y%m%d", "%d/%m/%Y")


def transform_date(value: Any) -> Optional[str]:
    """
    Normalize a host date/datetime value to ISO-8601.

    Returns None for empty or unparseable values.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value).strip()

    for fmt in _DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        if fmt in _DATE_ONLY_FORMATS:
            return parsed.date().isoformat()
        return parsed.isoformat()

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).isoformat()
    except ValueError:
        return None


def transform_html(value: Any) -> Any:
    """Strip markup and collapse whitespace."""
    if not isinstance(value, str) or not value:
        return value

    text = BeautifulSoup(value, "html.parser").get_text(separator=" ")
    return _WHITESPACE.sub(" ", text).strip()


def transform_boolean(value: Any) -> bool:
    # checkbox fields arrive as a (possibly empty) list of checked values
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false", "no", "off")
    return bool(value)


def transform_geo_point(value: Any) -> Optional[Dict[str, float]]:
    """Map a host map-field value ({lat, lng, ...}) to a geo point."""
    if not isinstance(value, dict):
        return None

    lat = value.get("lat")
    lon = value.get("lon", value.get("lng"))
    if lat in (None, "") or lon in (None, ""):
        return None

    try:
        return {"lat": float(lat), "lon": float(lon)}
    except (TypeError, ValueError):
        return None


TRANSFORMERS: Dict[str, Callable[[Any], Any]] = {
    "date": transform_date,
    "html": transform_html,
    "boolean": transform_boolean,
    "geo_point": transform_geo_point,
}


def apply_transformer(name: Optional[str], value: Any) -> Any:
    """
    Apply the named transformer to `value`.

    Unknown transformer names are a programming error and raise KeyError.
    """
    if name is None:
        return value
    return TRANSFORMERS[name](value)
