"""Pipeline modules for PageScan."""

from pagescan.pipeline.processor import DocumentProcessor, process_document
from pagescan.pipeline.orchestrator import DocumentScanner, ScanOptions, ScanResult

__all__ = [
    "DocumentProcessor",
    "process_document",
    "DocumentScanner",
    "ScanOptions",
    "ScanResult",
]
