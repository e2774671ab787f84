from __future__ import annotations

from nev_policy.model import coerce_policy
from nev_policy.selection import DEFAULT_HEADING, Selection, SelectionEngine, filter_policies

PROVINCES = ["上海市", "四川省", "广东省"]


def _policies(count: int = 60):
    return [
        coerce_policy(
            {
                "id": f"p{index}",
                "title": f"Policy {index}",
                "province": PROVINCES[index % len(PROVINCES)],
                "instruments": ["fiscal_purchase_subsidy"] if index % 2 == 0 else ["rd_grant"],
            }
        )
        for index in range(count)
    ]


def test_unfiltered_view_caps_at_fifty_rows_in_order() -> None:
    policies = _policies()
    engine = SelectionEngine(policies)

    visible = engine.visible()

    assert len(visible) == 50
    assert [policy.id for policy in visible] == [f"p{index}" for index in range(50)]
    assert len(engine.policies) == 60


def test_select_province_is_exact_and_idempotent() -> None:
    policies = _policies()
    engine = SelectionEngine(policies)

    first = engine.select_province("四川省")
    second = engine.select_province("四川省")

    expected = tuple(policy for policy in policies if policy.province == "四川省")
    assert first == expected
    assert second == first
    assert len(first) == 20
    assert engine.selection == Selection.by_province("四川省")


def test_province_mismatch_yields_empty_result() -> None:
    engine = SelectionEngine(_policies())

    assert engine.select_province("四川") == ()


def test_clear_restores_default_view() -> None:
    engine = SelectionEngine(_policies())
    default = engine.visible()

    engine.select_province("上海市")
    restored = engine.clear()

    assert restored == default
    assert engine.selection == Selection.unfiltered()
    assert engine.heading() == DEFAULT_HEADING


def test_select_instrument_uses_membership() -> None:
    policies = [
        coerce_policy({"id": "x1", "province": "上海市", "instruments": ["fiscal_purchase_subsidy"]}),
        coerce_policy({"id": "x2", "province": "上海市", "instruments": ["fiscal_purchase_subsidy_extra"]}),
    ]
    engine = SelectionEngine(policies)

    visible = engine.select_instrument("fiscal_purchase_subsidy")

    assert [policy.id for policy in visible] == ["x1"]
    assert engine.select_instrument("tax_exemption") == ()


def test_new_selection_replaces_previous_one() -> None:
    engine = SelectionEngine(_policies())

    engine.select_province("广东省")
    visible = engine.select_instrument("rd_grant")

    assert len(visible) == 30
    assert {policy.province for policy in visible} == set(PROVINCES)


def test_filtered_views_are_not_capped() -> None:
    policies = _policies(120)
    engine = SelectionEngine(policies)

    assert len(engine.select_instrument("rd_grant")) == 60


def test_heading_reflects_selection() -> None:
    engine = SelectionEngine(_policies())

    engine.select_province("上海市")
    assert engine.heading() == "Policies in: 上海市"

    engine.select_instrument("fiscal_purchase_subsidy")
    assert engine.heading() == "Policies using: fiscal purchase subsidy"


def test_get_returns_none_for_unknown_id() -> None:
    engine = SelectionEngine(_policies(3))

    assert engine.get("p1") is not None
    assert engine.get("missing") is None


def test_filter_policies_honours_custom_limit() -> None:
    assert len(filter_policies(_policies(10), Selection.unfiltered(), limit=4)) == 4
