"""
Envelope splitting: separates a header block from the body that follows it.
"""

from typing import NamedTuple

CRLF_BOUNDARY = "\r\n\r\n"
LF_BOUNDARY = "\n\n"


class Envelope(NamedTuple):
    """Header block and body of one MIME entity."""

    header_block: str
    body: str
    found: bool


def split_envelope(block: str) -> Envelope:
    """
    Split text at the first blank line.

    Both CRLF and bare LF conventions are accepted; whichever blank line
    starts first wins. Without a blank line the whole block is the body and
    the header block is empty.

    Args:
        block: Raw text of a message or sub-part

    Returns:
        Envelope with header block, body and whether a blank line was found
    """
    crlf = block.find(CRLF_BOUNDARY)
    lf = block.find(LF_BOUNDARY)

    if crlf == -1 and lf == -1:
        return Envelope("", block, False)

    if lf == -1 or (crlf != -1 and crlf < lf):
        return Envelope(block[:crlf], block[crlf + len(CRLF_BOUNDARY):], True)
    return Envelope(block[:lf], block[lf + len(LF_BOUNDARY):], True)
