"""
Cell value resolution for fin-sheet-ingest.

Converts one period cell of a field row into ``float | None``. Rules, in
order:

1. ``first_period_only`` fields are ``None`` after period 0, whatever the
   cell holds.
2. Not-applicable markers ("[Não Aplicável]", "[N/A]") give ``None``.
3. Eligibility, decided by the cell's fill:
   - locked fills (light greys used for N/A and section headers) are
     never read;
   - no fill at all is accepted;
   - a solid fill from the fillable allow-list is accepted;
   - any other fill is accepted only if the cell holds a plain literal
     (templates whose formatting was restyled by the user).
4. Ineligible cells give ``None``.
5. Eligible cells: formulas contribute their cached result, then the
   value is coerced to a finite float; failure gives ``None``.

Percentages are kept as entered (45 means 45%). Rescaling of decimal
fractions (0.45 -> 45) is opt-in via
``ExtractionConfig.rescale_fractional_percentages``.
"""

from __future__ import annotations

import math

from fin_sheet_ingest.config import ExtractionConfig
from fin_sheet_ingest.fields import FieldDefinition
from fin_sheet_ingest.workbook import (
    CellModel,
    EmptyValue,
    FillInfo,
    FormulaValue,
    NumberValue,
    TextValue,
)


def argb_matches(argb: str, allowed: tuple[str, ...]) -> bool:
    """Exact or suffix match, so "BFBFBF" accepts "FFBFBFBF"."""
    argb = argb.upper()
    return any(argb == color or argb.endswith(color) for color in allowed)


def is_locked_fill(fill: FillInfo | None, config: ExtractionConfig) -> bool:
    if fill is None or fill.argb is None:
        return False
    return fill.pattern_type == "solid" and argb_matches(fill.argb, config.locked_fills)


def is_fillable(fill: FillInfo | None, config: ExtractionConfig) -> bool:
    """True for "input" cells: no fill, or a solid fill from the allow-list."""
    if fill is None or fill.pattern_type is None:
        return True
    if fill.pattern_type == "solid" and fill.argb:
        return argb_matches(fill.argb, config.fillable_fills)
    return False


def is_eligible_cell(cell: CellModel, config: ExtractionConfig) -> bool:
    if is_locked_fill(cell.fill, config):
        return False
    if is_fillable(cell.fill, config):
        return True
    # Formatting-stripped fallback: plain literals are trusted
    return isinstance(cell.value, (NumberValue, TextValue)) and not cell.is_empty


def coerce_number(raw: float | str | None) -> float | None:
    """Coerce a literal to a finite float, or ``None``.

    Strings are stripped and parsed with ``float()``; blanks, thousands
    separators and non-finite values are rejected.
    """
    if raw is None:
        return None
    if isinstance(raw, (int, float)):
        number = float(raw)
    else:
        text = raw.strip()
        # float() would accept "1_000"
        if not text or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def raw_cell_value(cell: CellModel) -> float | str | None:
    """The literal a cell contributes; formulas contribute their cached result."""
    value = cell.value
    if isinstance(value, EmptyValue):
        return None
    if isinstance(value, NumberValue):
        return value.value
    if isinstance(value, TextValue):
        return value.text
    if isinstance(value, FormulaValue):
        return value.result
    raise TypeError(f"Unsupported cell value: {value!r}")


def resolve_cell(
    cell: CellModel,
    field_def: FieldDefinition,
    period_index: int,
    config: ExtractionConfig,
) -> float | None:
    """Resolve one period cell of a field row.

    Args:
        cell: The cell at column ``first_data_column + period_index``.
        field_def: Catalog entry of the row's field.
        period_index: 0-based period.
        config: Extraction settings (fills, markers, percentage rescaling).

    Returns:
        The numeric value, or ``None`` if the cell is not applicable,
        not eligible or not numeric.
    """
    if field_def.first_period_only and period_index > 0:
        return None

    text = cell.text
    if text is not None and text.strip() in config.not_applicable_markers:
        return None

    if not is_eligible_cell(cell, config):
        return None

    number = coerce_number(raw_cell_value(cell))
    if number is None:
        return None

    if (
        config.rescale_fractional_percentages
        and field_def.is_percentage
        and 0 < abs(number) < 1
    ):
        number = round(number * 100, 10)
    return number
