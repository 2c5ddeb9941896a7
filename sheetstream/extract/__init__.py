"""
Extract layer: target-list orchestration over the streaming xlsx reader.
"""

from sheetstream.extract.orchestrator import ExtractionOrchestrator, extract

__all__ = [
    "ExtractionOrchestrator",
    "extract",
]
