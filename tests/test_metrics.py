from __future__ import annotations

import pandas as pd

from nev_policy.metrics import (
    instrument_ranking,
    kpi_summary,
    province_map_series,
    timeline_series,
)
from nev_policy.model import coerce_dataset


def _dataset(**sections):
    document = {"policies": []}
    document.update(sections)
    return coerce_dataset(document)


def test_kpi_summary_uses_summary_label_and_province_keys() -> None:
    dataset = _dataset(
        summary={"total_policies": 99, "top_instrument": "fiscal_purchase_subsidy"},
        provinces={"四川省": {"count": 5}, "上海市": {"count": 1}},
        policies=[{"id": "a", "title": "A", "province": "四川省"}],
    )

    kpis = kpi_summary(dataset)

    assert kpis.total_count == 1
    assert kpis.top_instrument_label == "fiscal purchase subsidy"
    assert kpis.distinct_province_count == 2


def test_province_map_series_projects_count_and_intensity() -> None:
    dataset = _dataset(provinces={"四川省": {"count": 5, "subsidy_intensity": 2}})

    series = province_map_series(dataset)

    assert series.to_dict(orient="records") == [{"name": "四川省", "value": 5, "intensity": 2}]


def test_province_map_series_is_empty_without_provinces() -> None:
    series = province_map_series(_dataset(provinces={}))

    assert series.empty
    assert list(series.columns) == ["name", "value", "intensity"]


def test_timeline_series_keeps_source_order() -> None:
    dataset = _dataset(
        timeline=[{"year": 2021, "count": 3}, {"year": 2018, "count": 1}, {"year": 2020, "count": 2}]
    )

    timeline = timeline_series(dataset)

    assert timeline["year"].tolist() == [2021, 2018, 2020]
    assert timeline["count"].tolist() == [3, 1, 2]


def test_instrument_ranking_is_stable_under_ties() -> None:
    dataset = _dataset(
        global_instruments={
            "tax_exemption": 2,
            "fiscal_purchase_subsidy": 5,
            "rd_grant": 2,
            "fiscal_charging_infrastructure": 2,
        }
    )

    first = instrument_ranking(dataset)
    second = instrument_ranking(dataset)

    assert first["code"].tolist() == [
        "fiscal_purchase_subsidy",
        "tax_exemption",
        "rd_grant",
        "fiscal_charging_infrastructure",
    ]
    pd.testing.assert_frame_equal(first, second)


def test_instrument_ranking_keeps_code_beside_display_label() -> None:
    dataset = _dataset(global_instruments={"fiscal_purchase_subsidy": 4, "tax_exemption": 3})

    ranking = instrument_ranking(dataset)

    assert ranking["code"].tolist() == ["fiscal_purchase_subsidy", "tax_exemption"]
    assert ranking["label"].tolist() == ["purchase subsidy", "exemption"]


def test_instrument_ranking_truncates_to_top_eight() -> None:
    tally = {f"code_{index}": index for index in range(12)}

    ranking = instrument_ranking(_dataset(global_instruments=tally))

    assert len(ranking) == 8
    assert ranking["count"].tolist() == [11, 10, 9, 8, 7, 6, 5, 4]


def test_adapter_does_not_mutate_dataset() -> None:
    tally = {"b": 1, "a": 3}
    dataset = _dataset(global_instruments=tally)

    instrument_ranking(dataset)

    assert list(dataset.global_instruments.items()) == [("b", 1), ("a", 3)]
