"""
Extraction output types for fin-sheet-ingest.

``ParseResult`` is what the engine hands to the financial calculator:
exactly ``detected_period_count`` ``PeriodRecord``s, each a complete,
read-only map over the field catalog, plus soft warnings and a few
diagnostics describing which heuristics fired.

Warnings never abort a parse. The caller (the upload UI) decides whether,
for example, "no numeric data" should be shown as a hard failure.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

import pandas as pd

from fin_sheet_ingest.fields import FIELD_CATALOG, FieldKey


class ParseWarningCode(str, Enum):
    HEADER_PATTERN_NOT_FOUND = "header_pattern_not_found"
    PERIOD_COUNT_DEFAULTED = "period_count_defaulted"
    PERIOD_COUNT_CLAMPED = "period_count_clamped"
    NO_NUMERIC_DATA = "no_numeric_data"


@dataclass(frozen=True)
class ParseWarning:
    code: ParseWarningCode
    message: str

    def __str__(self) -> str:
        return self.message


class PeriodRecord(Mapping):
    """Immutable mapping ``FieldKey -> float | None`` for one period.

    Construction fills every catalog key that is missing from ``values``
    with an explicit ``None``, so a record is never partial. Keys can be
    given as ``FieldKey`` members or their string values.
    """

    __slots__ = ("_values",)

    def __init__(
        self,
        values: Mapping[FieldKey, float | None] | None = None,
        keys: Iterable[FieldKey] | None = None,
    ) -> None:
        values = values or {}
        ordered = {key: values.get(key) for key in (keys or FIELD_CATALOG)}
        unknown = set(values) - set(ordered)
        if unknown:
            raise KeyError(f"Values for keys outside the catalog: {sorted(unknown)}")
        self._values = MappingProxyType(ordered)

    def __getitem__(self, key: FieldKey | str) -> float | None:
        return self._values[key]

    def __iter__(self) -> Iterator[FieldKey]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PeriodRecord):
            return dict(self._values) == dict(other._values)
        if isinstance(other, Mapping):
            return dict(self._values) == dict(other.items())
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self._values.items()))

    def __repr__(self) -> str:
        filled = {k.value: v for k, v in self._values.items() if v is not None}
        return f"PeriodRecord({filled})"

    @property
    def filled_keys(self) -> list[FieldKey]:
        return [k for k, v in self._values.items() if v is not None]

    def to_dict(self) -> dict[str, float | None]:
        """Plain dict keyed by field-key strings (JSON friendly)."""
        return {k.value: v for k, v in self._values.items()}


@dataclass(frozen=True)
class CompletenessInsights:
    """How much of the catalog the upload filled.

    Attributes:
        filled_fields: Non-null driver and override values over all periods.
        total_expected: Driver plus override keys times the period count.
        has_overrides: ``True`` if any override field holds a value.
    """
    filled_fields: int
    total_expected: int
    has_overrides: bool

    @property
    def percentage(self) -> float:
        """Filled share in percent, one decimal."""
        if not self.total_expected:
            return 0.0
        return round(self.filled_fields / self.total_expected * 100, 1)


@dataclass(frozen=True)
class ParseResult:
    """Outcome of one extraction.

    Attributes:
        periods: One record per detected period, in period order.
        detected_period_count: Number of periods, within ``[1, max_periods]``.
        warnings: Soft, non-fatal findings.
        sheet_name: Name of the worksheet that was read.
        sheet_strategy: Which worksheet-selection rule matched
            (``template``, ``header_pattern``, ``data_sheet_name``,
            ``not_instruction_sheet`` or ``first_sheet``).
        period_strategy: Which period-detection rule decided the count
            (``explicit_pattern``, ``column_position``, ``data_rows`` or
            ``default``).
        found_any_data: ``True`` if at least one field resolved to a number.
        sheets_read: Every worksheet whose rows were read. More than one
            for a multi-sheet template.
        template: Name of the recognized template layout, or ``None``
            when the single-sheet heuristics were used.
        insights: Completeness of the extracted data.
        suggestions: Hints for the user derived from ``insights``.
    """

    periods: tuple[PeriodRecord, ...]
    detected_period_count: int
    warnings: tuple[ParseWarning, ...] = field(default_factory=tuple)
    sheet_name: str = ""
    sheet_strategy: str = ""
    period_strategy: str = ""
    found_any_data: bool = False
    sheets_read: tuple[str, ...] = ()
    template: str | None = None
    insights: CompletenessInsights | None = None
    suggestions: tuple[str, ...] = ()

    def has_warning(self, code: ParseWarningCode | str) -> bool:
        return any(w.code == code for w in self.warnings)

    def to_dicts(self) -> list[dict[str, float | None]]:
        return [period.to_dict() for period in self.periods]

    def to_dataframe(self) -> pd.DataFrame:
        """One row per period (index ``period``, 1-based), one column per field key.

        Unresolved fields become ``NaN``.
        """
        df = pd.DataFrame(
            self.to_dicts(),
            columns=[k.value for k in FIELD_CATALOG],
            dtype="float64",
        )
        df.index = pd.RangeIndex(1, len(df) + 1, name="period")
        return df
