from __future__ import annotations

import pytest

from nev_policy.model import DatasetError, Evidence, Summary, coerce_dataset, coerce_policy


def test_coerce_policy_fills_defaults() -> None:
    policy = coerce_policy({"id": 7, "title": "T", "province": "北京市", "year": "2020"})

    assert policy.id == "7"
    assert policy.year == 2020
    assert policy.instruments == ()
    assert policy.targets == {}
    assert policy.other == ()


def test_coerce_policy_drops_non_integer_year() -> None:
    policy = coerce_policy({"id": "a", "year": "unknown"})

    assert policy.year is None


def test_financial_instruments_last_writer_wins() -> None:
    policy = coerce_policy(
        {
            "id": "a",
            "subsidies": {"shared": {"value": "subsidy"}, "only_subsidy": {"value": "1"}},
            "taxes": {"shared": {"value": "tax"}},
            "rd": {"shared": {"value": "rd", "evidence": "quote"}},
        }
    )

    merged = policy.financial_instruments()

    assert merged["shared"] == Evidence(value="rd", evidence="quote")
    assert list(merged) == ["shared", "only_subsidy"]


def test_coerce_dataset_rejects_missing_policies() -> None:
    with pytest.raises(DatasetError):
        coerce_dataset({"summary": {}})


def test_coerce_dataset_rejects_non_object() -> None:
    with pytest.raises(DatasetError):
        coerce_dataset([1, 2, 3])


def test_coerce_dataset_rejects_duplicate_ids() -> None:
    with pytest.raises(DatasetError, match="duplicate"):
        coerce_dataset({"policies": [{"id": "a"}, {"id": "a"}]})


def test_coerce_dataset_derives_missing_sections() -> None:
    dataset = coerce_dataset(
        {
            "policies": [
                {
                    "id": "a",
                    "province": "上海市",
                    "year": 2021,
                    "instruments": ["tax_exemption"],
                    "subsidies": {"purchase": {"evidence": "quote"}},
                },
                {"id": "b", "province": "上海市", "year": 2020, "instruments": ["rd_grant", "tax_exemption"]},
                {"id": "c", "province": "四川省", "instruments": ["rd_grant"]},
            ]
        }
    )

    assert dataset.provinces["上海市"].count == 2
    assert dataset.provinces["上海市"].subsidy_intensity == 1
    assert dataset.provinces["四川省"].subsidy_intensity == 0
    assert dataset.global_instruments == {"tax_exemption": 2, "rd_grant": 2}
    assert [(bucket.year, bucket.count) for bucket in dataset.timeline] == [(2020, 1), (2021, 1)]
    assert dataset.summary.top_instrument == "tax_exemption"


def test_coerce_dataset_prefers_precomputed_sections() -> None:
    dataset = coerce_dataset(
        {
            "summary": {"total_policies": 10, "top_instrument": "rd_grant"},
            "provinces": {"北京市": {"count": 4, "subsidy_intensity": 1.5}},
            "policies": [{"id": "a", "province": "上海市"}],
        }
    )

    assert dataset.summary.top_instrument == "rd_grant"
    assert list(dataset.provinces) == ["北京市"]
    assert dataset.provinces["北京市"].subsidy_intensity == 1.5


def test_summary_keeps_only_the_top_instrument() -> None:
    dataset = coerce_dataset(
        {
            "summary": {"total_policies": 10, "top_instrument": ""},
            "global_instruments": {"rd_grant": 1, "tax_exemption": 4},
            "policies": [],
        }
    )

    assert dataset.summary == Summary(top_instrument="tax_exemption")
