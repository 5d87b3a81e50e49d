"""
Extraction configuration and YAML I/O for fin-sheet-ingest.

All the fixed knobs of the extraction heuristics live in one immutable
Pydantic model, ``ExtractionConfig``, which is passed into the engine's
entry point instead of being read from module-level globals. The defaults
reproduce the behaviour expected for the standard upload template; tests
and callers can build alternate configs without monkeypatching.

Key models:
- ExtractionConfig: Heuristic parameters for the whole extraction.
- TemplateLayout / TemplateSheet: Known multi-sheet templates, recognized
  by their sheet names and read sheet by sheet.

Key functions:
- load_config(path) -> ExtractionConfig: Load and validate from YAML.
- save_config(config, path): Serialize to YAML.

Why Pydantic + YAML:
- Pydantic gives strict validation, tuple coercion and clear errors.
- YAML is human-editable when a customer template uses other colours,
  header labels or sheet names.
- ``frozen=True`` keeps a config safe to share between concurrent parses.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from fin_sheet_ingest.exceptions import ConfigValidationError
from fin_sheet_ingest.fields import FieldCategory

logger = logging.getLogger(__name__)

MAX_PERIODS = 6

_YAML_HEADER = (
    "# fin-sheet-ingest extraction configuration\n"
    "# Edit header patterns, fill colours, markers or template sheet names\n"
    "# to match your workbooks. Keys left out keep their defaults.\n\n"
)


class TemplateSheet(BaseModel):
    """One worksheet of a multi-sheet template.

    Only rows whose field belongs to ``categories`` are read from it.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    categories: tuple[FieldCategory, ...]
    required: bool = False


class TemplateLayout(BaseModel):
    """A template recognized by sheet names rather than by heuristics.

    A workbook matches when every ``marker_sheets`` name and every
    required sheet is present (case-insensitive). Periods are detected on
    the first sheet; all present sheets are read with the same period
    columns and their records merged.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    marker_sheets: tuple[str, ...]
    sheets: tuple[TemplateSheet, ...]
    first_data_column: int = Field(3, ge=1)

    @model_validator(mode="after")
    def _check_sheets(self) -> TemplateLayout:
        if not self.sheets:
            raise ValueError(f"Template layout '{self.name}' lists no sheets")
        return self


# Generated by the platform: [key, description, data type, required?, P1..PN, notes]
SMART_ADAPTIVE_LAYOUT = TemplateLayout(
    name="smart_adaptive",
    marker_sheets=("📋 Instruções", "✅ Drivers"),
    sheets=(
        TemplateSheet(
            name="✅ Drivers",
            categories=("driver_required", "driver_optional"),
            required=True,
        ),
        TemplateSheet(name="🔧 Overrides DRE", categories=("override_pl",)),
        TemplateSheet(name="🔧 Overrides Balanço", categories=("override_bs",)),
        TemplateSheet(name="🔧 Overrides Caixa", categories=("override_cf",)),
    ),
    first_data_column=5,
)


class ExtractionConfig(BaseModel):
    """Heuristic parameters for worksheet selection, period detection and
    cell resolution.

    Fill colours are ARGB hex strings. They are matched by exact value or
    by suffix, so ``"BFBFBF"`` also matches ``"FFBFBFBF"``.
    """

    model_config = ConfigDict(frozen=True)

    max_periods: int = Field(
        MAX_PERIODS, ge=1, le=12, description="Upper clamp for the period count"
    )
    default_period_count: int = Field(
        2, ge=1, description="Period count used when detection is inconclusive"
    )
    header_patterns: tuple[str, ...] = Field(
        ("Item (Chave Interna)", "Campo", "Field Key", "Item", "Chave Interna"),
        description="Row-1 titles that identify the data-entry worksheet",
    )
    period_substrings: tuple[str, ...] = Field(
        ("período ", "periodo ", "per ", "p1", "p2", "p3", "p4", "p5", "p6"),
        description="Lower-case substrings that mark a period header cell",
    )
    notes_markers: tuple[str, ...] = Field(
        ("nota", "instruç"),
        description="Header substrings that start the trailing notes region",
    )
    data_sheet_marker: str = "dados"
    instruction_sheet_marker: str = "instru"
    fillable_fills: tuple[str, ...] = Field(
        ("FFBFBFBF", "BFBFBF", "D9E8FB", "FFF0CB"),
        description="Fill colours of editable input cells",
    )
    locked_fills: tuple[str, ...] = Field(
        ("E0E0E0", "D3D3D3", "EAEAEA"),
        description="Fill colours of locked / not-applicable cells, never read",
    )
    not_applicable_markers: tuple[str, ...] = ("[Não Aplicável]", "[N/A]")
    first_data_column: int = Field(
        3, ge=1, description="1-based column of the first period"
    )
    data_sample_rows: tuple[int, ...] = Field(
        (2, 3, 4, 5), description="Rows sampled by the data-row period strategy"
    )
    rescale_fractional_percentages: bool = Field(
        False,
        description="If True, percentage fields with 0 < |v| < 1 are scaled by 100",
    )
    template_layouts: tuple[TemplateLayout, ...] = Field(
        (SMART_ADAPTIVE_LAYOUT,),
        description="Multi-sheet templates tried before single-sheet selection",
    )

    @field_validator("fillable_fills", "locked_fills")
    @classmethod
    def _upper_case_fills(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(v.strip().upper() for v in value)

    @model_validator(mode="after")
    def _check_default_within_max(self) -> ExtractionConfig:
        """The fallback period count must itself satisfy the clamp."""
        if self.default_period_count > self.max_periods:
            raise ValueError(
                f"default_period_count ({self.default_period_count}) exceeds "
                f"max_periods ({self.max_periods})"
            )
        return self


DEFAULT_CONFIG = ExtractionConfig()


def load_config(path: str | Path) -> ExtractionConfig:
    """Load and validate an extraction config YAML file.

    Keys missing from the file keep their defaults.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigValidationError: If the file is empty or not a mapping.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    raw: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not raw:
        raise ConfigValidationError(f"Config file is empty: {path}")
    if not isinstance(raw, dict):
        raise ConfigValidationError(
            f"Config file must contain a mapping, got {type(raw).__name__}: {path}"
        )
    config = ExtractionConfig.model_validate(raw)
    logger.info("Loaded extraction config from %s (%d keys set)", path, len(raw))
    return config


def save_config(config: ExtractionConfig, path: str | Path) -> None:
    """Write ``config`` as commented YAML; every field is written out."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    body = yaml.safe_dump(
        config.model_dump(mode="json"),
        allow_unicode=True,
        default_flow_style=False,
        sort_keys=False,
    )
    path.write_text(_YAML_HEADER + body, encoding="utf-8")
    logger.info("Saved extraction config to %s", path)
