"""
Unit tests for period-count detection (fin_sheet_ingest.periods).

Each test builds a small worksheet whose header (and sometimes data rows)
exercises one strategy of the chain.
"""

import pytest

from fin_sheet_ingest.config import DEFAULT_CONFIG, ExtractionConfig
from fin_sheet_ingest.periods import (
    count_header_span,
    detect_period_count,
    is_period_label,
    longest_data_run,
)
from fin_sheet_ingest.workbook import row_from_values
from tests.conftest import make_sheet

KEY_COLS = ["Item (Chave Interna)", "Descrição"]


def _detect(rows, config=DEFAULT_CONFIG):
    return detect_period_count(make_sheet("Dados", rows), config)


class TestPeriodLabels:

    @pytest.mark.parametrize("text", [
        "Período 1", "periodo 2", "PERÍODO 10", "Periodo3", "P1", "Per 2",
    ])
    def test_period_labels(self, text):
        assert is_period_label(text, DEFAULT_CONFIG)

    @pytest.mark.parametrize("text", ["Descrição", "2023", "Notas", "Item (Chave Interna)"])
    def test_non_labels(self, text):
        assert not is_period_label(text, DEFAULT_CONFIG)


class TestExplicitPattern:

    @pytest.mark.parametrize("n", [1, 2, 3, 4, 5, 6])
    def test_counts_labels(self, n):
        header = KEY_COLS + [f"Período {i}" for i in range(1, n + 1)]
        detection = _detect([header])
        assert detection.count == n
        assert detection.strategy == "explicit_pattern"
        assert not detection.defaulted

    def test_clamped_to_max(self):
        header = KEY_COLS + [f"Período {i}" for i in range(1, 9)]
        detection = _detect([header])
        assert detection.count == 6
        assert detection.raw_count == 8
        assert detection.clamped

    def test_notes_column_not_counted(self):
        detection = _detect([KEY_COLS + ["Período 1", "Período 2", "Notas"]])
        assert detection.count == 2


class TestColumnPosition:

    def test_header_span(self):
        detection = _detect([KEY_COLS + ["2022", "2023", "2024"]])
        assert detection.count == 3
        assert detection.strategy == "column_position"

    def test_span_stops_at_notes_marker(self):
        header = row_from_values(KEY_COLS + ["2022", "2023", "Notas", "extra"])
        assert count_header_span(header, DEFAULT_CONFIG) == 2

    def test_short_header(self):
        header = row_from_values(["Item"])
        assert count_header_span(header, DEFAULT_CONFIG) == 0

    def test_span_clamped(self):
        header = KEY_COLS + [str(2016 + i) for i in range(9)]
        detection = _detect([header])
        assert detection.count == 6
        assert detection.strategy == "column_position"
        assert detection.clamped


class TestDataRows:

    def test_data_rows_used_when_header_cleared(self):
        rows = [
            KEY_COLS,
            ["revenue", "Receita", 100, 200, 300, 400],
            ["openingCash", "Caixa", 10],
        ]
        detection = _detect(rows)
        assert detection.count == 4
        assert detection.strategy == "data_rows"

    def test_longest_run_stops_at_gap(self):
        row = row_from_values(["revenue", "", None, 1, 2, None, 3])
        assert longest_data_run(row, DEFAULT_CONFIG) == 2

    def test_only_sampled_rows(self):
        """Rows past the sample window do not influence the count."""
        rows = [KEY_COLS] + [["x", "y"]] * 5 + [["revenue", "", 1, 2, 3]]
        detection = _detect(rows)
        assert detection.strategy == "default"


class TestDefault:

    def test_nothing_detectable(self):
        detection = _detect([["Item"]])
        assert detection.count == 2
        assert detection.strategy == "default"
        assert detection.defaulted
        assert not detection.clamped

    def test_single_column_defaults_to_two(self):
        detection = _detect([KEY_COLS + ["2024"], ["revenue", "", 5]])
        assert detection.count == 2
        assert detection.defaulted

    def test_custom_default(self):
        cfg = ExtractionConfig(default_period_count=3)
        assert _detect([["Item"]], cfg).count == 3
