"""Bank CSV ingestion: dialect detection, row extraction and parsing."""

from .detect import DetectedLayout, detect_layout
from .dialects import Dialect
from .parser import parse_csv

__all__ = ["DetectedLayout", "Dialect", "detect_layout", "parse_csv"]
