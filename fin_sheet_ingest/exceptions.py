"""
Custom exception hierarchy for fin-sheet-ingest.

Why a custom hierarchy:
- Callers (the upload UI) can tell a broken file (DecodeError) apart from
  an empty workbook (NoWorksheetError) or a bad YAML config
  (ConfigValidationError) without catching generic ValueError/RuntimeError.
- Soft problems (no header match, no numeric data, defaulted period count)
  are NOT exceptions. They are attached to ``ParseResult.warnings``.
"""


class FinSheetIngestError(Exception):
    """Base exception for all fin-sheet-ingest errors."""


class DecodeError(FinSheetIngestError):
    """Raised when the uploaded bytes cannot be decoded as an .xlsx workbook.

    Wraps the underlying openpyxl / zipfile error (available as
    ``__cause__``). No partial result is produced.
    """


class NoWorksheetError(FinSheetIngestError):
    """Raised when a decoded workbook contains zero worksheets.

    Practically never happens with a valid .xlsx file, but a hand-built
    ``WorkbookModel`` can be empty.
    """


class ConfigValidationError(FinSheetIngestError):
    """Raised when an extraction config YAML file is unusable.

    This can happen if:
    - The file is empty.
    - The top-level YAML node is not a mapping.
    """
