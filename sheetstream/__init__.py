"""
sheetstream: memory-bounded extraction of named sheets from large .xlsx workbooks.
"""

from sheetstream.errors import OpenError, ParseError, ResolutionError, SheetStreamError
from sheetstream.extract import ExtractionOrchestrator, extract
from sheetstream.ir import (
    AggregateStatus,
    CellType,
    ExtractionOutcome,
    ExtractionResult,
    OutcomeStatus,
    Table,
)

__all__ = [
    "extract",
    "ExtractionOrchestrator",
    "AggregateStatus",
    "CellType",
    "ExtractionOutcome",
    "ExtractionResult",
    "OutcomeStatus",
    "Table",
    "SheetStreamError",
    "OpenError",
    "ParseError",
    "ResolutionError",
]
