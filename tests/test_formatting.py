from __future__ import annotations

from nev_policy.formatting import instrument_label, instrument_tag, target_label, truncate_title


def test_instrument_label_strips_leading_prefixes_only() -> None:
    assert instrument_label("fiscal_purchase_subsidy") == "purchase subsidy"
    assert instrument_label("tax_exemption") == "exemption"
    assert instrument_label("local_fiscal_support") == "local fiscal support"


def test_instrument_tag_is_last_segment() -> None:
    assert instrument_tag("fiscal_purchase_subsidy") == "subsidy"
    assert instrument_tag("other") == "other"


def test_target_label_drops_target_prefix() -> None:
    assert target_label("target_vehicle_sales") == "vehicle sales"


def test_truncated_titles_never_exceed_thirty_eight_characters() -> None:
    for length in (0, 34, 35, 36, 80):
        title = "x" * length
        truncated = truncate_title(title)
        assert len(truncated) <= 38
        if length > 35:
            assert truncated.endswith("...")
        else:
            assert truncated == title
