"""
Header normalization for inbound messages and MIME sub-parts.

Top-level headers arrive from the transport already unfolded, so they are
only normalized. Sub-part headers are cut from a raw body slice and need
their continuation lines folded first.
"""

import re
from email.errors import MessageError
from email.header import decode_header, make_header
from typing import Dict, Iterable, List, Tuple

import structlog

from ..models.email_document import HeaderMap, HeaderValue

logger = structlog.get_logger(__name__)

# A line break followed by leading whitespace continues the previous header
_CONTINUATION_RE = re.compile(r"\r?\n[ \t]+")
_LINE_BREAK_RE = re.compile(r"\r?\n")


def normalize_headers(pairs: Iterable[Tuple[str, str]]) -> HeaderMap:
    """
    Build a case-insensitive HeaderMap from ordered (name, value) pairs.

    The first occurrence of a name stores a scalar; a repeated name is
    promoted to a list holding every value in arrival order.

    Args:
        pairs: Header name/value pairs, duplicates permitted

    Returns:
        HeaderMap keyed by lower-cased name
    """
    entries: Dict[str, HeaderValue] = {}
    for name, value in pairs:
        key = name.lower()
        existing = entries.get(key)
        if existing is None:
            entries[key] = value
        elif isinstance(existing, list):
            existing.append(value)
        else:
            entries[key] = [existing, value]
    return HeaderMap(entries)


def unfold_header_block(block: str) -> str:
    """Replace each line break plus leading whitespace with a single space."""
    return _CONTINUATION_RE.sub(" ", block)


def split_header_lines(block: str) -> List[Tuple[str, str]]:
    """
    Split a raw header block into (name, value) pairs.

    Continuation lines are folded first. Lines without a colon, or with an
    empty name, are not headers and are dropped.
    """
    pairs = []
    for line in _LINE_BREAK_RE.split(unfold_header_block(block)):
        name, sep, value = line.partition(":")
        name = name.strip()
        if not sep or not name:
            continue
        pairs.append((name, value.strip()))
    return pairs


def parse_header_block(block: str) -> HeaderMap:
    """Parse a raw header block cut from a message or sub-part."""
    return normalize_headers(split_header_lines(block))


def decode_header_value(value: str) -> str:
    """
    Decode RFC 2047 encoded words (=?charset?B?...?=) in a header value.

    Values that cannot be decoded are returned unchanged.
    """
    if "=?" not in value:
        return value
    try:
        return str(make_header(decode_header(value)))
    except (MessageError, LookupError, UnicodeError) as e:
        logger.debug("Encoded header left undecoded", error=str(e))
        return value
