"""
Demo script: extract period records from one or more .xlsx uploads.

Usage:
    python scripts/run_extract.py inputs/template.xlsx
    python scripts/run_extract.py inputs/*.xlsx --config extraction.yaml

Prints the detected sheet, period count, warnings and a table of the
fields that resolved to a number.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("run_extract")


# ---------------------------------------------------------------------------
# Helper
# ---------------------------------------------------------------------------

def _split_args(argv: list[str]) -> tuple[list[str], str | None]:
    """Separate input paths from an optional ``--config <path>`` pair."""
    paths: list[str] = []
    config_path: str | None = None
    it = iter(argv)
    for arg in it:
        if arg == "--config":
            config_path = next(it, None)
        else:
            paths.append(arg)
    return paths, config_path


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> None:
    import fin_sheet_ingest

    paths, config_path = _split_args(sys.argv[1:])
    if not paths:
        log.error("Usage: run_extract.py <file.xlsx> [...] [--config extraction.yaml]")
        sys.exit(2)

    config = fin_sheet_ingest.load_config(config_path) if config_path else None

    for input_path in paths:
        if not Path(input_path).exists():
            log.warning("SKIP  %s  (file not found)", input_path)
            continue

        log.info("=" * 70)
        log.info("Processing: %s", input_path)
        log.info("=" * 70)

        try:
            result = fin_sheet_ingest.parse_file(input_path, config)
        except fin_sheet_ingest.FinSheetIngestError as e:
            log.error("FAILED  %s: %s", input_path, e)
            continue

        log.info("  sheet        : %s (%s)", result.sheet_name, result.sheet_strategy)
        log.info("  periods      : %d (%s)", result.detected_period_count, result.period_strategy)
        if result.template:
            log.info("  template     : %s (%s)", result.template, ", ".join(result.sheets_read))
        for warning in result.warnings:
            log.info("  warning      : %s", warning)
        if result.insights is not None:
            log.info(
                "  completeness : %.1f%% (%d/%d values)",
                result.insights.percentage,
                result.insights.filled_fields,
                result.insights.total_expected,
            )
        for suggestion in result.suggestions:
            log.info("  suggestion   : %s", suggestion)

        df = result.to_dataframe().dropna(axis=1, how="all")
        if df.empty:
            log.info("  no fields resolved")
        else:
            print(df.T.to_string())

        log.info("Done: %s\n", input_path)


if __name__ == "__main__":
    main()
