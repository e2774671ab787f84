from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import pandas as pd

from nev_policy.formatting import (
    format_value,
    format_year,
    humanize_code,
    instrument_tag,
    target_label,
    truncate_title,
)
from nev_policy.metrics import KpiSummary
from nev_policy.model import PolicyRecord
from nev_policy.selection import SelectionEngine

EMPTY_TABLE_MESSAGE = "No policies found matching filter."
EMPTY_TARGETS_MESSAGE = "No specific quantitative targets found."
EMPTY_FINANCE_MESSAGE = "No specific financial instruments found."
EMPTY_OTHER_MESSAGE = "None."
MAX_TABLE_TAGS = 2
TABLE_COLUMNS = ["policy_id", "title", "full_title", "province", "year", "tags"]


@dataclass(frozen=True)
class TableRow:
    policy_id: str
    title: str
    full_title: str
    province: str
    year: str
    tags: tuple[str, ...]


@dataclass(frozen=True)
class DetailItem:
    label: str
    value: str
    evidence: str | None = None


@dataclass(frozen=True)
class DetailBlock:
    items: tuple[DetailItem, ...]
    empty_message: str

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass(frozen=True)
class TagBlock:
    tags: tuple[str, ...]
    empty_message: str

    @property
    def is_empty(self) -> bool:
        return not self.tags


@dataclass(frozen=True)
class PolicyDetail:
    policy_id: str
    title: str
    targets: DetailBlock
    finance: DetailBlock
    other: TagBlock


def table_row(policy: PolicyRecord) -> TableRow:
    return TableRow(
        policy_id=policy.id,
        title=truncate_title(policy.title),
        full_title=policy.title,
        province=policy.province,
        year=format_year(policy.year),
        tags=tuple(instrument_tag(code) for code in policy.instruments[:MAX_TABLE_TAGS]),
    )


def table_rows(policies: Iterable[PolicyRecord]) -> list[TableRow]:
    return [table_row(policy) for policy in policies]


def table_frame(policies: Iterable[PolicyRecord]) -> pd.DataFrame:
    rows = [
        {
            "policy_id": row.policy_id,
            "title": row.title,
            "full_title": row.full_title,
            "province": row.province,
            "year": row.year,
            "tags": " ".join(row.tags),
        }
        for row in table_rows(policies)
    ]
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def _evidence_text(evidence: object) -> str | None:
    if evidence is None or str(evidence).strip() == "":
        return None
    return str(evidence)


def _target_block(policy: PolicyRecord) -> DetailBlock:
    items = []
    for code, entry in policy.targets.items():
        if not entry.has_value:
            continue
        value = format_value(entry.value)
        if "vehicle" in code:
            value = f"{value} Vehicles"
        items.append(
            DetailItem(label=target_label(code), value=value, evidence=_evidence_text(entry.evidence))
        )
    return DetailBlock(items=tuple(items), empty_message=EMPTY_TARGETS_MESSAGE)


def _finance_block(policy: PolicyRecord) -> DetailBlock:
    items = []
    for code, entry in policy.financial_instruments().items():
        if not (entry.has_value or entry.has_evidence):
            continue
        value = format_value(entry.value) if entry.has_value else "Yes"
        items.append(
            DetailItem(label=humanize_code(code), value=value, evidence=_evidence_text(entry.evidence))
        )
    return DetailBlock(items=tuple(items), empty_message=EMPTY_FINANCE_MESSAGE)


def build_policy_detail(policy: PolicyRecord) -> PolicyDetail:
    return PolicyDetail(
        policy_id=policy.id,
        title=policy.title,
        targets=_target_block(policy),
        finance=_finance_block(policy),
        other=TagBlock(tags=tuple(policy.other), empty_message=EMPTY_OTHER_MESSAGE),
    )


def policy_detail(engine: SelectionEngine, policy_id: str) -> PolicyDetail | None:
    policy = engine.get(policy_id)
    if policy is None:
        return None
    return build_policy_detail(policy)


def kpi_slots(kpis: KpiSummary) -> dict[str, str]:
    return {
        "kpi-total": str(kpis.total_count),
        "kpi-top-inst": kpis.top_instrument_label,
        "kpi-provinces": str(kpis.distinct_province_count),
    }
