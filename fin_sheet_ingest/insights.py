"""
Completeness diagnostics for fin-sheet-ingest.

After extraction the upload UI shows how much of the catalog was filled
and nudges the user towards missing drivers or optional overrides.
"""

from __future__ import annotations

from collections.abc import Sequence

from fin_sheet_ingest.fields import driver_field_keys, is_override_field, override_field_keys
from fin_sheet_ingest.result import CompletenessInsights, PeriodRecord

# Below this share the drivers are too sparse for a useful report
LOW_COMPLETENESS_PCT = 50.0
# Below this share, and with no overrides, actual values are worth suggesting
OVERRIDE_HINT_PCT = 80.0

LOW_COMPLETENESS_SUGGESTION = (
    "Many driver fields are empty. Fill in more drivers for a more complete analysis."
)
OVERRIDE_SUGGESTION = (
    "Consider filling the override fields where actual values are known, "
    "for more precise statements."
)


def analyze_completeness(periods: Sequence[PeriodRecord]) -> CompletenessInsights:
    """Count filled driver and override values across ``periods``."""
    expected = set(driver_field_keys()) | set(override_field_keys())
    filled = 0
    has_overrides = False
    for record in periods:
        for key in record.filled_keys:
            if key in expected:
                filled += 1
            if is_override_field(key):
                has_overrides = True
    return CompletenessInsights(
        filled_fields=filled,
        total_expected=len(expected) * len(periods),
        has_overrides=has_overrides,
    )


def suggest_improvements(insights: CompletenessInsights) -> tuple[str, ...]:
    suggestions: list[str] = []
    if insights.percentage < LOW_COMPLETENESS_PCT:
        suggestions.append(LOW_COMPLETENESS_SUGGESTION)
    if not insights.has_overrides and insights.percentage < OVERRIDE_HINT_PCT:
        suggestions.append(OVERRIDE_SUGGESTION)
    return tuple(suggestions)
