"""Per-dialect row extractors.

Every module exposes ``extract(headers, cols) -> ExtractedRow`` returning the
description, the raw date string and an amount already normalized to the
canonical sign convention (expenses negative, income positive).
"""
