from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

class DatasetError(ValueError):
    """Raised when a policy dataset document does not have the expected shape."""


@dataclass(frozen=True)
class Evidence:
    value: Any = None
    evidence: str | None = None

    @property
    def has_value(self) -> bool:
        return _has_text(self.value)

    @property
    def has_evidence(self) -> bool:
        return _has_text(self.evidence)


@dataclass(frozen=True)
class PolicyRecord:
    id: str
    title: str
    province: str
    year: int | None = None
    instruments: tuple[str, ...] = ()
    targets: Mapping[str, Evidence] = field(default_factory=dict)
    subsidies: Mapping[str, Evidence] = field(default_factory=dict)
    taxes: Mapping[str, Evidence] = field(default_factory=dict)
    rd: Mapping[str, Evidence] = field(default_factory=dict)
    other: tuple[str, ...] = ()

    def financial_instruments(self) -> dict[str, Evidence]:
        # later sections win on key collision
        merged: dict[str, Evidence] = {}
        for section in (self.subsidies, self.taxes, self.rd):
            merged.update(section)
        return merged


@dataclass(frozen=True)
class ProvinceStat:
    count: int
    subsidy_intensity: float


@dataclass(frozen=True)
class Summary:
    top_instrument: str


@dataclass(frozen=True)
class TimelineBucket:
    year: int | str
    count: int


@dataclass(frozen=True)
class Dataset:
    summary: Summary
    provinces: Mapping[str, ProvinceStat]
    timeline: tuple[TimelineBucket, ...]
    global_instruments: Mapping[str, int]
    policies: tuple[PolicyRecord, ...]


def _has_text(value: Any) -> bool:
    if value is None:
        return False
    return str(value).strip() != ""


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not number.is_integer():
        return None
    return int(number)


def _as_number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return int(number) if number.is_integer() else number


def _coerce_evidence_map(raw: Any, *, context: str) -> dict[str, Evidence]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise DatasetError(f"{context} must be an object, got {type(raw).__name__}")

    output: dict[str, Evidence] = {}
    for key, entry in raw.items():
        if isinstance(entry, Mapping):
            output[str(key)] = Evidence(value=entry.get("value"), evidence=entry.get("evidence"))
        elif entry is None:
            output[str(key)] = Evidence()
        else:
            output[str(key)] = Evidence(value=entry)
    return output


def _coerce_string_list(raw: Any, *, context: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str) or not isinstance(raw, Iterable):
        raise DatasetError(f"{context} must be a list of strings")
    return tuple(str(item) for item in raw if item is not None)


def coerce_policy(raw: Any, index: int = 0) -> PolicyRecord:
    if not isinstance(raw, Mapping):
        raise DatasetError(f"policies[{index}] must be an object")

    policy_id = raw.get("id")
    if not _has_text(policy_id):
        raise DatasetError(f"policies[{index}] is missing an id")
    context = f"policy {policy_id}"

    return PolicyRecord(
        id=str(policy_id),
        title=str(raw.get("title") or ""),
        province=str(raw.get("province") or ""),
        year=_as_int(raw.get("year")),
        instruments=_coerce_string_list(raw.get("instruments"), context=f"{context} instruments"),
        targets=_coerce_evidence_map(raw.get("targets"), context=f"{context} targets"),
        subsidies=_coerce_evidence_map(raw.get("subsidies"), context=f"{context} subsidies"),
        taxes=_coerce_evidence_map(raw.get("taxes"), context=f"{context} taxes"),
        rd=_coerce_evidence_map(raw.get("rd"), context=f"{context} rd"),
        other=_coerce_string_list(raw.get("other"), context=f"{context} other"),
    )


def derive_province_stats(policies: Iterable[PolicyRecord]) -> dict[str, ProvinceStat]:
    counts: Counter[str] = Counter()
    subsidised: Counter[str] = Counter()
    for policy in policies:
        if not policy.province:
            continue
        counts[policy.province] += 1
        if any(item.has_value or item.has_evidence for item in policy.subsidies.values()):
            subsidised[policy.province] += 1

    return {
        province: ProvinceStat(count=count, subsidy_intensity=subsidised.get(province, 0))
        for province, count in counts.items()
    }


def derive_instrument_tally(policies: Iterable[PolicyRecord]) -> dict[str, int]:
    tally: Counter[str] = Counter()
    for policy in policies:
        tally.update(policy.instruments)
    # Counter keeps first-seen insertion order
    return dict(tally)


def derive_timeline(policies: Iterable[PolicyRecord]) -> tuple[TimelineBucket, ...]:
    years = Counter(policy.year for policy in policies if policy.year is not None)
    return tuple(TimelineBucket(year=year, count=years[year]) for year in sorted(years))


def derive_summary(tally: Mapping[str, int]) -> Summary:
    top_instrument = ""
    top_count = 0
    for code, count in tally.items():
        if count > top_count:
            top_instrument, top_count = code, count
    return Summary(top_instrument=top_instrument)


def _coerce_provinces(raw: Any) -> dict[str, ProvinceStat]:
    if not isinstance(raw, Mapping):
        raise DatasetError("provinces must be an object keyed by province name")

    provinces: dict[str, ProvinceStat] = {}
    for name, stats in raw.items():
        stats = stats if isinstance(stats, Mapping) else {}
        provinces[str(name)] = ProvinceStat(
            count=_as_int(stats.get("count")) or 0,
            subsidy_intensity=_as_number(stats.get("subsidy_intensity")),
        )
    return provinces


def _coerce_timeline(raw: Any) -> tuple[TimelineBucket, ...]:
    if isinstance(raw, str) or not isinstance(raw, Iterable):
        raise DatasetError("timeline must be a list of {year, count} objects")

    buckets = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            raise DatasetError("timeline entries must be objects")
        year = _as_int(entry.get("year"))
        buckets.append(
            TimelineBucket(
                year=year if year is not None else str(entry.get("year")),
                count=_as_int(entry.get("count")) or 0,
            )
        )
    return tuple(buckets)


def _coerce_tally(raw: Any) -> dict[str, int]:
    if not isinstance(raw, Mapping):
        raise DatasetError("global_instruments must be an object keyed by instrument code")
    return {str(code): _as_int(count) or 0 for code, count in raw.items()}


def coerce_dataset(document: Any) -> Dataset:
    if not isinstance(document, Mapping):
        raise DatasetError("dataset document must be a JSON object")

    raw_policies = document.get("policies")
    if not isinstance(raw_policies, list):
        raise DatasetError("dataset document must contain a 'policies' list")

    policies = tuple(coerce_policy(raw, index) for index, raw in enumerate(raw_policies))
    seen: set[str] = set()
    for policy in policies:
        if policy.id in seen:
            raise DatasetError(f"duplicate policy id: {policy.id}")
        seen.add(policy.id)

    if document.get("provinces") is not None:
        provinces = _coerce_provinces(document["provinces"])
    else:
        logger.info("Dataset has no provinces section; deriving it from %s policies", len(policies))
        provinces = derive_province_stats(policies)

    if document.get("global_instruments") is not None:
        tally = _coerce_tally(document["global_instruments"])
    else:
        tally = derive_instrument_tally(policies)

    if document.get("timeline") is not None:
        timeline = _coerce_timeline(document["timeline"])
    else:
        timeline = derive_timeline(policies)

    raw_summary = document.get("summary")
    top_instrument = raw_summary.get("top_instrument") if isinstance(raw_summary, Mapping) else None
    if top_instrument:
        summary = Summary(top_instrument=str(top_instrument))
    else:
        summary = derive_summary(tally)

    return Dataset(
        summary=summary,
        provinces=provinces,
        timeline=timeline,
        global_instruments=tally,
        policies=policies,
    )

