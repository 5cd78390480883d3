"""Merchant-key extraction.

The merchant key is a short, deterministic fingerprint of a transaction
description. It is the join key for stored merchant rules, for counting
"other transactions from this merchant" and for bulk reclassification.
"""

from __future__ import annotations

import re

_LONG_NUMBER_RE = re.compile(r"\b\d{4,}\b")
_TRAILING_STATE_RE = re.compile(r"\b[A-Z]{2}\b$")
_ASTERISKS_RE = re.compile(r"\*+")
_HASH_AT_RE = re.compile(r"[#@]")
_WHITESPACE_RE = re.compile(r"\s+")

_MAX_TOKENS = 3


def merchant_key(description: str | None) -> str:
    """Return the normalized merchant key for ``description``.

    Steps: drop 4+ digit runs (reference numbers), drop a trailing two-letter
    uppercase token (state), turn ``*``, ``#`` and ``@`` into spaces, collapse
    whitespace, keep the first three tokens longer than one character and
    lower-case them. ``None``/empty input yields ``""``.

    >>> merchant_key("AMAZON.COM*AB12CD3 123456 WA")
    'amazon.com ab12cd3'
    """

    if not description:
        return ""
    s = _LONG_NUMBER_RE.sub("", description)
    s = _TRAILING_STATE_RE.sub("", s)
    s = _ASTERISKS_RE.sub(" ", s)
    s = _HASH_AT_RE.sub(" ", s)
    s = _WHITESPACE_RE.sub(" ", s).strip()
    words = [w for w in s.split(" ") if len(w) > 1][:_MAX_TOKENS]
    return " ".join(words).lower()


__all__ = ["merchant_key"]
