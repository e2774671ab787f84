from __future__ import annotations

import json
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import requests

from nev_policy.geometry import sanitize_geometry, unmatched_provinces
from nev_policy.model import Dataset, DatasetError, coerce_dataset

logger = logging.getLogger(__name__)

DEFAULT_DATA_URL = "data/data.json"
DEFAULT_GEO_URL = "https://geo.datav.aliyun.com/areas_v3/bound/100000_full.json"
DEFAULT_TIMEOUT_SECONDS = 30.0


class DatasetLoadError(RuntimeError):
    """Raised when either dashboard source cannot be fetched or parsed."""


@dataclass(frozen=True)
class DashboardSources:
    data_url: str = DEFAULT_DATA_URL
    geo_url: str = DEFAULT_GEO_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> DashboardSources:
        return cls(
            data_url=os.environ.get("NEV_DASHBOARD_DATA_URL", DEFAULT_DATA_URL),
            geo_url=os.environ.get("NEV_DASHBOARD_GEO_URL", DEFAULT_GEO_URL),
        )


@dataclass(frozen=True)
class LoadedSources:
    dataset: Dataset
    geometry: dict[str, Any]


def _is_remote(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def fetch_json(location: str, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> Any:
    logger.info("Fetching %s", location)
    try:
        if _is_remote(location):
            response = requests.get(location, timeout=timeout)
            response.raise_for_status()
            return response.json()
        return json.loads(Path(location).read_text(encoding="utf-8"))
    except (requests.RequestException, OSError, ValueError) as exc:
        raise DatasetLoadError(f"Failed to load {location}: {exc}") from exc


def _build_dataset(document: Any, location: str) -> Dataset:
    try:
        return coerce_dataset(document)
    except DatasetError as exc:
        raise DatasetLoadError(f"Invalid policy dataset at {location}: {exc}") from exc


def _build_geometry(document: Any, location: str) -> dict[str, Any]:
    if not isinstance(document, dict) or not isinstance(document.get("features"), list):
        raise DatasetLoadError(f"Invalid boundary geometry at {location}: missing 'features' list")
    return sanitize_geometry(document)


def load_sources(sources: DashboardSources | None = None) -> LoadedSources:
    sources = sources or DashboardSources.from_env()

    with ThreadPoolExecutor(max_workers=2) as pool:
        data_future = pool.submit(fetch_json, sources.data_url, sources.timeout)
        geo_future = pool.submit(fetch_json, sources.geo_url, sources.timeout)
        # both must resolve; the first failure aborts the load
        data_document = data_future.result()
        geo_document = geo_future.result()

    dataset = _build_dataset(data_document, sources.data_url)
    geometry = _build_geometry(geo_document, sources.geo_url)

    missing = unmatched_provinces(dataset.provinces.keys(), geometry)
    if missing:
        logger.warning(
            "Provinces with no matching boundary region will show as no data: %s",
            ", ".join(missing),
        )

    logger.info(
        "Dashboard sources loaded. policies=%s provinces=%s regions=%s",
        len(dataset.policies),
        len(dataset.provinces),
        len(geometry["features"]),
    )
    return LoadedSources(dataset=dataset, geometry=geometry)
