from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

logger = logging.getLogger(__name__)

DISPUTED_ADCODE = 710000
DISPUTED_NAME_MARKERS = ("台湾", "Taiwan")


def _properties(feature: Any) -> Mapping[str, Any]:
    if not isinstance(feature, Mapping):
        return {}
    properties = feature.get("properties")
    return properties if isinstance(properties, Mapping) else {}


def _is_disputed_adcode(adcode: Any) -> bool:
    if adcode is None or isinstance(adcode, bool):
        return False
    try:
        return float(adcode) == DISPUTED_ADCODE
    except (TypeError, ValueError):
        return False


def is_drawable_region(feature: Any) -> bool:
    properties = _properties(feature)
    name = properties.get("name") or ""
    if not isinstance(name, str):
        name = str(name)

    if _is_disputed_adcode(properties.get("adcode")):
        return False
    if any(marker in name for marker in DISPUTED_NAME_MARKERS):
        return False
    # unnamed features are separator line artifacts
    if name == "":
        return False
    return True


def sanitize_geometry(geojson: Mapping[str, Any]) -> dict[str, Any]:
    sanitized = dict(geojson)
    features = geojson.get("features")
    if not isinstance(features, list):
        return sanitized

    kept = [feature for feature in features if is_drawable_region(feature)]
    dropped = len(features) - len(kept)
    if dropped:
        logger.info("Dropped %s non-drawable regions from boundary geometry", dropped)
    sanitized["features"] = kept
    return sanitized


def region_names(geojson: Mapping[str, Any]) -> list[str]:
    features = geojson.get("features")
    if not isinstance(features, list):
        return []
    names = []
    for feature in features:
        name = _properties(feature).get("name")
        if name:
            names.append(str(name))
    return names


def unmatched_provinces(province_names: Iterable[str], geojson: Mapping[str, Any]) -> list[str]:
    """Return dataset provinces that have no region with exactly the same name."""
    known = set(region_names(geojson))
    return [name for name in province_names if name not in known]
