from .lister import list_candidates, walk_files
from .scanner import Finding, FileScanOutcome, ScanError, ScanSkipped, scan_file, scan_lines
from .rewriter import RewriteOutcome, rewrite_file, replace_bounded

__all__ = [
    "list_candidates", "walk_files",
    "Finding", "FileScanOutcome", "ScanError", "ScanSkipped", "scan_file", "scan_lines",
    "RewriteOutcome", "rewrite_file", "replace_bounded",
]
