"""
Recursive MIME content dispatch.

Walks a message body top-down without building a tree: multipart bodies are
split at their boundary and every sub-part is fed back through the same
dispatch, leaf parts are transfer-decoded and accumulated as text or html.
"""

import re
from typing import Optional

import structlog

from ..models.email_document import DecodedContent
from .envelope import split_envelope
from .headers import parse_header_block
from .transfer_decoding import HeuristicTransferDecoder, TransferDecoder

logger = structlog.get_logger(__name__)

DEFAULT_MAX_DEPTH = 20

_BOUNDARY_RE = re.compile(r'boundary\s*=\s*"?([^";\s]+)', re.IGNORECASE)


def extract_boundary(content_type: str) -> Optional[str]:
    """
    Extract the boundary parameter of a Content-Type value.

    Args:
        content_type: Full Content-Type header value

    Returns:
        Boundary token (case preserved), or None when absent
    """
    match = _BOUNDARY_RE.search(content_type or "")
    return match.group(1) if match else None


class MimeWalker:
    """
    Content dispatcher and boundary recursor.

    Args:
        decoder: Transfer decoding strategy for leaf parts
        max_depth: Multipart nesting limit; deeper multiparts are opaque
    """

    def __init__(
        self,
        decoder: Optional[TransferDecoder] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.decoder = decoder or HeuristicTransferDecoder()
        self.max_depth = max_depth

    def dispatch(
        self,
        body: str,
        content_type: str = "",
        transfer_encoding: Optional[str] = None,
        depth: int = 0,
    ) -> DecodedContent:
        """
        Decode a body according to its content type.

        multipart/* is split and recursed into, text/html is decoded as
        html, anything else (including a missing type) is decoded as text.

        Args:
            body: Body text of the entity
            content_type: Content-Type header value, parameters included
            transfer_encoding: Content-Transfer-Encoding header value, if any
            depth: Current multipart nesting level

        Returns:
            DecodedContent for this entity and everything below it
        """
        media_type = (content_type or "").strip().lower()

        if media_type.startswith("multipart/"):
            if depth >= self.max_depth:
                logger.warning(
                    "MIME nesting limit reached, skipping multipart",
                    depth=depth,
                    max_depth=self.max_depth,
                )
                return DecodedContent()
            boundary = extract_boundary(content_type)
            if boundary is None:
                logger.debug("Multipart without boundary", content_type=content_type)
                return DecodedContent()
            return self.split_multipart(body, boundary, depth)

        decoded = self.decoder.decode(body, transfer_encoding)
        if media_type.startswith("text/html"):
            return DecodedContent(html=decoded)
        return DecodedContent(text=decoded)

    def split_multipart(self, body: str, boundary: str, depth: int = 0) -> DecodedContent:
        """
        Split a multipart body at its boundary and dispatch every sub-part.

        Fragments are trimmed; empty ones and the bare "--" left by the
        closing delimiter are skipped. Fragments without a blank line
        between headers and body are not valid parts and are skipped too.
        """
        result = DecodedContent()
        delimiter = re.compile(r"(?:^|\r?\n)--" + re.escape(boundary))

        for fragment in delimiter.split(body):
            fragment = fragment.strip()
            if not fragment or fragment == "--":
                continue

            envelope = split_envelope(fragment)
            if not envelope.found:
                logger.debug("Skipping sub-part without header block", boundary=boundary)
                continue

            part_headers = parse_header_block(envelope.header_block)
            result.merge(
                self.dispatch(
                    envelope.body,
                    part_headers.get_first("content-type", ""),
                    part_headers.get_first("content-transfer-encoding"),
                    depth + 1,
                )
            )

        return result


def decode_content(
    body: str,
    content_type: str = "",
    decoder: Optional[TransferDecoder] = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> DecodedContent:
    """Decode a message body with a one-off MimeWalker."""
    return MimeWalker(decoder=decoder, max_depth=max_depth).dispatch(body, content_type)
