"""Drill-down selection over the canonical policy collection.

Exactly one selection is active at a time. A new selection replaces the
previous one, and the visible records are always recomputed from the full
collection rather than from the last result.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Literal

from nev_policy.formatting import humanize_code
from nev_policy.model import PolicyRecord

DEFAULT_ROW_CAP = 50
DEFAULT_HEADING = "Policy Evidence Locker"

SelectionKind = Literal["all", "province", "instrument"]


@dataclass(frozen=True)
class Selection:
    kind: SelectionKind = "all"
    value: str | None = None

    @classmethod
    def unfiltered(cls) -> Selection:
        return cls()

    @classmethod
    def by_province(cls, name: str) -> Selection:
        return cls(kind="province", value=name)

    @classmethod
    def by_instrument(cls, code: str) -> Selection:
        return cls(kind="instrument", value=code)

    @property
    def is_filtered(self) -> bool:
        return self.kind != "all"


def filter_policies(
    policies: Iterable[PolicyRecord],
    selection: Selection,
    limit: int = DEFAULT_ROW_CAP,
) -> tuple[PolicyRecord, ...]:
    if selection.kind == "province":
        return tuple(policy for policy in policies if policy.province == selection.value)
    if selection.kind == "instrument":
        return tuple(policy for policy in policies if selection.value in policy.instruments)
    return tuple(policies)[:limit]


class SelectionEngine:
    def __init__(
        self,
        policies: Iterable[PolicyRecord],
        selection: Selection | None = None,
        *,
        row_cap: int = DEFAULT_ROW_CAP,
    ) -> None:
        self._policies = tuple(policies)
        self._by_id = {policy.id: policy for policy in self._policies}
        self._row_cap = row_cap
        self._selection = selection or Selection.unfiltered()
        self._visible = filter_policies(self._policies, self._selection, self._row_cap)

    @property
    def policies(self) -> tuple[PolicyRecord, ...]:
        return self._policies

    @property
    def selection(self) -> Selection:
        return self._selection

    def visible(self) -> tuple[PolicyRecord, ...]:
        return self._visible

    def apply(self, selection: Selection) -> tuple[PolicyRecord, ...]:
        self._selection = selection
        self._visible = filter_policies(self._policies, selection, self._row_cap)
        return self._visible

    def select_province(self, name: str) -> tuple[PolicyRecord, ...]:
        return self.apply(Selection.by_province(name))

    def select_instrument(self, code: str) -> tuple[PolicyRecord, ...]:
        return self.apply(Selection.by_instrument(code))

    def clear(self) -> tuple[PolicyRecord, ...]:
        return self.apply(Selection.unfiltered())

    def get(self, policy_id: str) -> PolicyRecord | None:
        return self._by_id.get(policy_id)

    def heading(self) -> str:
        if self._selection.kind == "province":
            return f"Policies in: {self._selection.value}"
        if self._selection.kind == "instrument":
            return f"Policies using: {humanize_code(self._selection.value or '')}"
        return DEFAULT_HEADING
