"""
Unit tests for cell resolution (fin_sheet_ingest.resolve).
"""

import math

import pytest

from fin_sheet_ingest.config import DEFAULT_CONFIG, ExtractionConfig
from fin_sheet_ingest.fields import FieldKey, get_field
from fin_sheet_ingest.resolve import (
    argb_matches,
    coerce_number,
    is_eligible_cell,
    is_fillable,
    resolve_cell,
)
from fin_sheet_ingest.workbook import CellModel, FillInfo, FormulaValue, cell_from_python
from tests.conftest import INPUT_FILL, LOCKED_GREY, NA_GREY, SECTION_BLUE, solid

REVENUE = get_field(FieldKey.REVENUE)
OPENING_CASH = get_field(FieldKey.OPENING_CASH)
GROSS_MARGIN = get_field(FieldKey.GROSS_MARGIN_PERCENTAGE)


def _resolve(value, fill=None, field_def=REVENUE, period=0, config=DEFAULT_CONFIG):
    return resolve_cell(cell_from_python(value, fill), field_def, period, config)


class TestFills:

    def test_argb_suffix_match(self):
        assert argb_matches("FFBFBFBF", ("BFBFBF",))
        assert argb_matches("ffd9e8fb", ("D9E8FB",))
        assert not argb_matches("FF1F4E78", ("BFBFBF",))

    def test_no_fill_is_fillable(self):
        assert is_fillable(None, DEFAULT_CONFIG)
        assert is_fillable(FillInfo(pattern_type=None), DEFAULT_CONFIG)

    def test_allow_listed_solid_fill(self):
        assert is_fillable(solid(INPUT_FILL), DEFAULT_CONFIG)
        assert is_fillable(solid("FFD9E8FB"), DEFAULT_CONFIG)

    def test_other_fills_not_fillable(self):
        assert not is_fillable(solid(SECTION_BLUE), DEFAULT_CONFIG)
        assert not is_fillable(FillInfo("gray125", INPUT_FILL), DEFAULT_CONFIG)
        assert not is_fillable(FillInfo("solid", None), DEFAULT_CONFIG)

    def test_locked_fill_never_eligible(self):
        assert not is_eligible_cell(cell_from_python(100, solid(LOCKED_GREY)), DEFAULT_CONFIG)
        assert not is_eligible_cell(cell_from_python(100, solid(NA_GREY)), DEFAULT_CONFIG)

    def test_literal_in_restyled_cell_is_eligible(self):
        assert is_eligible_cell(cell_from_python(100, solid(SECTION_BLUE)), DEFAULT_CONFIG)
        assert not is_eligible_cell(cell_from_python(None, solid(SECTION_BLUE)), DEFAULT_CONFIG)

    def test_formula_in_restyled_cell_not_eligible(self):
        cell = CellModel(FormulaValue("=B2", result=5.0), solid(SECTION_BLUE))
        assert not is_eligible_cell(cell, DEFAULT_CONFIG)


class TestCoerceNumber:

    @pytest.mark.parametrize("raw, expected", [
        (1000000.0, 1000000.0),
        (7, 7.0),
        ("  42.5 ", 42.5),
        ("-3", -3.0),
        ("1e3", 1000.0),
    ])
    def test_numbers(self, raw, expected):
        assert coerce_number(raw) == expected

    @pytest.mark.parametrize("raw", [
        None, "", "   ", "abc", "1,000", "1_000", "nan", "inf", float("inf"), math.nan,
    ])
    def test_rejected(self, raw):
        assert coerce_number(raw) is None


class TestResolveCell:

    def test_plain_number(self):
        assert _resolve(1000000) == 1000000.0

    def test_numeric_string(self):
        assert _resolve(" 250 ", solid(INPUT_FILL)) == 250.0

    def test_non_numeric_text(self):
        assert _resolve("a confirmar") is None

    def test_blank(self):
        assert _resolve(None, solid(INPUT_FILL)) is None

    @pytest.mark.parametrize("marker", ["[N/A]", " [Não Aplicável] "])
    def test_not_applicable_marker(self, marker):
        assert _resolve(marker) is None

    def test_locked_grey_ignored(self):
        assert _resolve(1100000, solid(LOCKED_GREY)) is None

    def test_boolean_is_text(self):
        assert _resolve(True) is None

    def test_formula_uses_cached_result(self):
        cell = CellModel(FormulaValue("=C2*1", result=1000000.0))
        assert resolve_cell(cell, REVENUE, 0, DEFAULT_CONFIG) == 1000000.0

    def test_formula_without_result(self):
        cell = CellModel(FormulaValue("=C2*1"))
        assert resolve_cell(cell, REVENUE, 0, DEFAULT_CONFIG) is None

    def test_formula_with_text_result(self):
        cell = CellModel(FormulaValue('="12"', result="12"))
        assert resolve_cell(cell, REVENUE, 0, DEFAULT_CONFIG) == 12.0

    def test_first_period_only(self):
        assert _resolve(50000, field_def=OPENING_CASH, period=0) == 50000.0
        assert _resolve(50000, field_def=OPENING_CASH, period=1) is None
        assert _resolve(50000, field_def=OPENING_CASH, period=5) is None

    def test_percentage_kept_as_entered(self):
        assert _resolve(45, field_def=GROSS_MARGIN) == 45.0
        assert _resolve(0.45, field_def=GROSS_MARGIN) == 0.45

    def test_percentage_rescale_opt_in(self):
        cfg = ExtractionConfig(rescale_fractional_percentages=True)
        assert _resolve(0.45, field_def=GROSS_MARGIN, config=cfg) == 45.0
        assert _resolve(45, field_def=GROSS_MARGIN, config=cfg) == 45.0
        assert _resolve(0, field_def=GROSS_MARGIN, config=cfg) == 0.0
        # currency fields are never rescaled
        assert _resolve(0.45, config=cfg) == 0.45
