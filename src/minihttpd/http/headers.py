"""
=============================================================================
HEADER LINE TOKENIZER
=============================================================================

Every place that needs to read request headers goes through this module:
the framing layer (to find Content-Length before the message is complete)
and the request decoder (to build HTTPRequest.headers). Keeping the policy
in one spot means both layers always agree on what a header is.

=============================================================================
HEADER LINE POLICY
=============================================================================

    "User-Agent: curl/8.4.0"     → ("user-agent", "curl/8.4.0")
    "X-Empty: "                  → ("x-empty", "")
    "Host:localhost"             → skipped (no ": " separator)
    "garbage"                    → skipped
    "Accept: a" + "Accept: b"    → {"accept": "b"}   (last one wins)

- Lines are split on the FIRST ": " only, so values may contain ": ".
- Names are lower-cased; values are kept exactly as received.
- Lines without ": " are skipped instead of failing the whole request.
  Resilience is preferred over strict RFC 7230 conformance here.

=============================================================================
"""

import re
from typing import Dict, Iterable, List, Optional


HEADER_TERMINATOR = b"\r\n\r\n"
HEADER_SEPARATOR = ": "

# The head is decoded with surrogateescape so arbitrary bytes in the
# request line survive a decode/encode round trip unchanged.
HEAD_ENCODING = "utf-8"
HEAD_ERRORS = "surrogateescape"

# Content-Length must be plain ASCII digits. int() alone would also accept
# "+5", " 5", "5_000" and non-ASCII digits.
_DECIMAL = re.compile(r"[0-9]+")


def split_head(head: bytes) -> List[str]:
    """Decode a header block (request line included) into its lines."""
    return head.decode(HEAD_ENCODING, HEAD_ERRORS).split("\r\n")


def parse_header_lines(lines: Iterable[str]) -> Dict[str, str]:
    """
    Tokenize header lines into a case-insensitive mapping.

    Args:
        lines: Header lines without their trailing CRLF (request line excluded).

    Returns:
        Dict of lower-cased header name → raw value. Duplicate names keep
        the last occurrence.
    """
    headers: Dict[str, str] = {}

    for line in lines:
        name, sep, value = line.partition(HEADER_SEPARATOR)
        if not sep or not name:
            continue
        headers[name.lower()] = value

    return headers


def content_length(headers: Dict[str, str]) -> Optional[int]:
    """
    Get the declared body length, if there is a usable one.

    Returns:
        The non-negative integer value, or None when the header is missing
        or malformed. Callers treat None exactly like "no body declared",
        so a bad Content-Length never leaves a connection hanging.
    """
    raw = headers.get("content-length")
    if raw is None:
        return None

    raw = raw.strip()
    if not _DECIMAL.fullmatch(raw):
        return None
    return int(raw)
