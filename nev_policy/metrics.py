from __future__ import annotations

from dataclasses import dataclass

import pandas as pd

from nev_policy.formatting import humanize_code, instrument_label
from nev_policy.model import Dataset

TOP_INSTRUMENTS = 8


@dataclass(frozen=True)
class KpiSummary:
    total_count: int
    top_instrument_label: str
    distinct_province_count: int


def kpi_summary(dataset: Dataset) -> KpiSummary:
    return KpiSummary(
        total_count=len(dataset.policies),
        top_instrument_label=humanize_code(dataset.summary.top_instrument),
        distinct_province_count=len(dataset.provinces),
    )


def province_map_series(dataset: Dataset) -> pd.DataFrame:
    rows = [
        {"name": name, "value": stats.count, "intensity": stats.subsidy_intensity}
        for name, stats in dataset.provinces.items()
    ]
    return pd.DataFrame(rows, columns=["name", "value", "intensity"])


def timeline_series(dataset: Dataset) -> pd.DataFrame:
    rows = [{"year": bucket.year, "count": bucket.count} for bucket in dataset.timeline]
    return pd.DataFrame(rows, columns=["year", "count"])


def instrument_ranking(dataset: Dataset, top_n: int = TOP_INSTRUMENTS) -> pd.DataFrame:
    tally = pd.DataFrame(
        {
            "code": list(dataset.global_instruments.keys()),
            "count": list(dataset.global_instruments.values()),
        },
        columns=["code", "count"],
    )
    if tally.empty:
        return pd.DataFrame(columns=["code", "label", "count"])

    ranked = (
        tally.sort_values("count", ascending=False, kind="stable")
        .head(top_n)
        .reset_index(drop=True)
    )
    ranked["label"] = ranked["code"].map(instrument_label)
    return ranked.loc[:, ["code", "label", "count"]]
