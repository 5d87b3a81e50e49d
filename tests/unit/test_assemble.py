"""
Unit tests for record assembly (fin_sheet_ingest.assemble).
"""

import pytest

from fin_sheet_ingest.assemble import assemble_records, merge_assemblies
from fin_sheet_ingest.config import DEFAULT_CONFIG
from fin_sheet_ingest.fields import FIELD_CATALOG, FieldKey, field_keys
from tests.conftest import LOCKED_GREY, TEMPLATE_HEADER, make_sheet, solid


def _assemble(rows, period_count=3, fills=None, hidden_rows=()):
    ws = make_sheet("Dados", rows, fills=fills, hidden_rows=hidden_rows)
    return assemble_records(ws, period_count, DEFAULT_CONFIG)


class TestAssembleRecords:

    def test_one_complete_record_per_period(self):
        result = _assemble([
            TEMPLATE_HEADER,
            ["revenue", "Receita", 1000000, 1100000, 1200000],
            ["operatingExpenses", "SG&A", 300000, 310000, 320000],
        ])
        assert len(result.periods) == 3
        for record in result.periods:
            assert set(record) == set(FIELD_CATALOG)
        assert [p[FieldKey.REVENUE] for p in result.periods] == [1000000, 1100000, 1200000]
        assert result.periods[2]["operatingExpenses"] == 320000
        assert result.periods[0][FieldKey.DIVIDENDS_PAID] is None
        assert result.found_any_data
        assert result.rows_matched == 2

    def test_header_row_never_read_as_data(self):
        """A header cell that happens to hold a key is not a field row."""
        result = _assemble([["revenue", "x", 1, 2, 3]])
        assert result.rows_matched == 0
        assert not result.found_any_data

    def test_label_and_section_rows_skipped(self):
        result = _assemble([
            TEMPLATE_HEADER,
            ["DEMONSTRAÇÃO DE RESULTADO"],
            ["Receita Líquida", "", 5, 5, 5],
            ["Hidden Field", "", 9, 9, 9],
            ["revenue", "", 1, 2, 3],
        ])
        assert result.rows_matched == 1
        assert result.rows_skipped == 3
        assert result.periods[0][FieldKey.REVENUE] == 1

    def test_locked_cell_in_middle_period(self):
        result = _assemble(
            [TEMPLATE_HEADER, ["revenue", "Receita", 1000000, 1100000, 1200000]],
            fills={(2, 4): solid(LOCKED_GREY)},
        )
        assert [p["revenue"] for p in result.periods] == [1000000, None, 1200000]

    def test_first_period_only_field(self):
        result = _assemble([TEMPLATE_HEADER, ["openingCash", "Caixa", 50000, 60000, 70000]])
        assert [p["openingCash"] for p in result.periods] == [50000, None, None]

    def test_hidden_rows_are_read(self):
        result = _assemble(
            [TEMPLATE_HEADER, ["dividendsPaid", "", 10, 20, 30]],
            hidden_rows=(2,),
        )
        assert result.periods[1]["dividendsPaid"] == 20

    def test_extra_columns_beyond_period_count_ignored(self):
        result = _assemble(
            [TEMPLATE_HEADER, ["revenue", "", 1, 2, 3, 4, 5]],
            period_count=2,
        )
        assert len(result.periods) == 2
        assert result.periods[1]["revenue"] == 2

    def test_no_recognized_rows(self):
        result = _assemble([TEMPLATE_HEADER, ["foo", "", 1, 2, 3]], period_count=2)
        assert not result.found_any_data
        assert all(v is None for record in result.periods for v in record.values())

    def test_later_duplicate_row_wins(self):
        result = _assemble([
            TEMPLATE_HEADER,
            ["revenue", "", 1, 1, 1],
            ["revenue", "", 2, None, 2],
        ])
        assert [p["revenue"] for p in result.periods] == [2, None, 2]


class TestMergeAssemblies:

    def test_sheets_fill_their_own_categories(self):
        drivers = make_sheet("Drivers", [
            TEMPLATE_HEADER,
            ["revenue", "", 1, 2, 3],
            ["override_ebitda", "", 7, 7, 7],
        ])
        overrides = make_sheet("Overrides", [
            TEMPLATE_HEADER,
            ["override_ebitda", "", None, None, 9],
            ["revenue", "", 5, 5, 5],
        ])
        driver_part = assemble_records(
            drivers, 3, DEFAULT_CONFIG,
            {k: FIELD_CATALOG[k] for k in field_keys(("driver_required", "driver_optional"))},
        )
        override_part = assemble_records(
            overrides, 3, DEFAULT_CONFIG,
            {k: FIELD_CATALOG[k] for k in field_keys("override_pl")},
        )
        merged = merge_assemblies([driver_part, override_part])

        assert [p["revenue"] for p in merged.periods] == [1, 2, 3]
        assert [p["override_ebitda"] for p in merged.periods] == [None, None, 9]
        assert set(merged.periods[0]) == set(FIELD_CATALOG)
        assert merged.rows_matched == 2
        assert merged.rows_skipped == 2
        assert merged.found_any_data

    def test_single_part_unchanged(self):
        part = _assemble([TEMPLATE_HEADER, ["revenue", "", 1, None, 3]])
        assert merge_assemblies([part]) == part

    def test_period_count_mismatch(self):
        with pytest.raises(ValueError, match="Cannot merge"):
            merge_assemblies([_assemble([TEMPLATE_HEADER], 2), _assemble([TEMPLATE_HEADER], 3)])

    def test_nothing_to_merge(self):
        with pytest.raises(ValueError):
            merge_assemblies([])
