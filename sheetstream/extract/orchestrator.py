"""
ExtractionOrchestrator: drives the streaming pipeline for a fixed target list.

Handles:
- opening the workbook and building the shared-string table once
- per-target lookup, parse and table assembly
- per-sheet error isolation (one failed sheet never stops the others)
- cancellation between targets

An ``OpenError`` is not isolated: without a usable container no target can
be attempted, so it propagates to the caller.
"""

from __future__ import annotations

import threading
import traceback
from typing import Dict, List, Optional, Sequence

from sheetstream.config import get_settings
from sheetstream.excel.assembler import TableAssembler
from sheetstream.excel.config import DEFAULT_CONFIG, ReaderConfig
from sheetstream.excel.container import WorkbookContainer, open_document
from sheetstream.excel.row_parser import iter_rows
from sheetstream.excel.shared_strings import CellValueResolver
from sheetstream.ir import ExtractionOutcome, ExtractionResult, aggregate_status
from sheetstream.logger import get_logger

logger = get_logger(__name__)


class ExtractionOrchestrator:
    """
    Sequential extractor for a fixed, ordered list of sheet names.

    Each target is looked up with an exact, case-sensitive match. Duplicate
    names in the target list are attempted once.
    """

    def __init__(self, target_sheet_names: Sequence[str], cfg: ReaderConfig = DEFAULT_CONFIG):
        self._targets: List[str] = list(dict.fromkeys(target_sheet_names))
        self._cfg = cfg

    @property
    def target_sheet_names(self) -> List[str]:
        return list(self._targets)

    def run(
        self,
        file_path: str,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> ExtractionResult:
        """
        Extract every target sheet from *file_path*.

        Returns an :class:`ExtractionResult` holding one outcome per target
        (in target order). When *cancel_event* is set, processing stops before
        the next target and the remaining names are reported in ``pending``.
        """
        result = ExtractionResult(file_path=str(file_path))
        outcomes: Dict[str, ExtractionOutcome] = {}

        with open_document(file_path, self._cfg) as container:
            resolver = CellValueResolver(container.shared_strings())
            for position, name in enumerate(self._targets):
                if cancel_event is not None and cancel_event.is_set():
                    result.cancelled = True
                    result.pending = self._targets[position:]
                    logger.warning(
                        "Extraction cancelled: %d of %d targets not attempted",
                        len(result.pending), len(self._targets),
                    )
                    break
                outcomes[name] = self._extract_sheet(container, resolver, name)

        result.outcomes = outcomes
        result.status = aggregate_status(list(outcomes.values()), len(self._targets))
        result.has_failures = bool(result.failed_names)
        logger.info("Extraction complete for %s: %s", file_path, result.summary())
        return result

    # -- helpers -------------------------------------------------------------

    def _extract_sheet(
        self,
        container: WorkbookContainer,
        resolver: CellValueResolver,
        name: str,
    ) -> ExtractionOutcome:
        assembler = TableAssembler()
        try:
            stream = container.find_sheet(name)
            if stream is None:
                logger.info("Sheet not found: %s", name)
                return ExtractionOutcome.not_found(name)
            with stream:
                for row in iter_rows(stream, resolver, self._cfg.chunk_size, sheet_name=name):
                    assembler.add_row(row)
        except Exception as exc:
            self._log_failure(name, exc)
            return ExtractionOutcome.failed(name, exc)

        table = assembler.build()
        warnings: List[str] = []
        if assembler.truncated_rows:
            logger.warning(
                "Sheet %s: %d rows longer than the header were truncated to %d columns",
                name, assembler.truncated_rows, table.width,
            )
            warnings.append(f"rows_truncated_to_header_width:{assembler.truncated_rows}")
        logger.info("Sheet %s: %d columns, %d rows", name, table.width, len(table.rows))
        return ExtractionOutcome.found(name, table, warnings)

    @staticmethod
    def _log_failure(name: str, exc: Exception) -> None:
        logger.error("Sheet %s failed: %s: %s", name, type(exc).__name__, exc)
        logger.debug("Traceback: %s", traceback.format_exc())


def extract(
    file_path: str,
    targets: Optional[Sequence[str]] = None,
    *,
    cancel_event: Optional[threading.Event] = None,
    chunk_size: Optional[int] = None,
) -> ExtractionResult:
    """
    Synchronous entry point: extract *targets* (default: configured
    ``TARGET_SHEET_NAMES``) from the workbook at *file_path*.

    Raises ``OpenError`` when the workbook cannot be opened.
    """
    settings = get_settings()
    if targets is None:
        targets = settings.TARGET_SHEET_NAMES
    cfg = ReaderConfig(chunk_size=chunk_size or settings.STREAM_CHUNK_SIZE)
    return ExtractionOrchestrator(targets, cfg).run(file_path, cancel_event=cancel_event)
