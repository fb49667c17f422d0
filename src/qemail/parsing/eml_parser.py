"""
Top-level decoding of raw inbound messages.

Combines the envelope splitter, header normalizer and MIME walker into a
single call that never raises on malformed input: whatever cannot be
found or decoded is simply absent from the result.
"""

import secrets
import time
from typing import Iterable, Optional, Tuple, Union

import charset_normalizer
import structlog

from ..config import settings
from ..models.email_document import HeaderMap, ParsedEmail
from ..version import PARSER_VERSION
from .envelope import split_envelope
from .headers import decode_header_value, normalize_headers, parse_header_block
from .mime_walker import MimeWalker
from .transfer_decoding import TransferDecoder, bytes_to_text, get_transfer_decoder

logger = structlog.get_logger(__name__)

NO_SUBJECT = "(No Subject)"
MESSAGE_ID_DOMAIN = "qemail.worker"


def extract_subject(headers: HeaderMap) -> str:
    """
    Get the display subject of a message.

    Args:
        headers: Normalized message headers

    Returns:
        Trimmed, RFC 2047-decoded subject, or "(No Subject)" when blank
    """
    subject = decode_header_value(headers.get_first("subject") or "").strip()
    return subject or NO_SUBJECT


def synthesize_message_id() -> str:
    """Fallback identifier of the form <millis.random@qemail.worker>."""
    return f"<{int(time.time() * 1000)}.{secrets.token_hex(6)}@{MESSAGE_ID_DOMAIN}>"


def extract_message_id(headers: HeaderMap) -> str:
    """Trimmed Message-Id header, or a synthesized one when absent or blank."""
    message_id = (headers.get_first("message-id") or "").strip()
    return message_id or synthesize_message_id()


def detect_encoding(raw: bytes) -> Optional[str]:
    """
    Guess the character encoding of raw message bytes with charset-normalizer.

    Informational only; decoding always follows the UTF-8 first rule.
    """
    if not raw:
        return None
    detected = charset_normalizer.from_bytes(raw).best()
    return detected.encoding if detected else None


def parse_inbound_email(
    raw: Union[bytes, str],
    headers: Optional[Iterable[Tuple[str, str]]] = None,
    from_address: str = "",
    to_address: str = "",
    decoder: Optional[TransferDecoder] = None,
    max_depth: Optional[int] = None,
) -> ParsedEmail:
    """
    Decode a raw inbound message.

    Args:
        raw: Full raw message (headers and body)
        headers: Ordered header pairs from the transport; when omitted the
            header block at the top of the raw message is parsed instead
        from_address: Envelope sender
        to_address: Envelope recipient
        decoder: Transfer decoding strategy (defaults to settings)
        max_depth: Multipart nesting limit (defaults to settings)

    Returns:
        ParsedEmail with headers, subject, message id, text and html
    """
    raw_bytes = raw if isinstance(raw, bytes) else raw.encode("utf-8", errors="replace")
    text = bytes_to_text(raw) if isinstance(raw, bytes) else raw

    envelope = split_envelope(text)
    if headers is not None:
        header_map = normalize_headers(headers)
    else:
        header_map = parse_header_block(envelope.header_block)

    walker = MimeWalker(
        decoder=decoder or get_transfer_decoder(settings.transfer_decoding),
        max_depth=max_depth if max_depth is not None else settings.max_mime_depth,
    )
    content = walker.dispatch(
        envelope.body,
        header_map.get_first("content-type", ""),
        header_map.get_first("content-transfer-encoding"),
    )

    try:
        encoding = detect_encoding(raw_bytes)
    except Exception as e:
        logger.debug("Encoding detection failed", error=str(e))
        encoding = None

    parsed = ParsedEmail(
        from_address=from_address,
        to_address=to_address,
        headers=header_map.to_dict(),
        subject=extract_subject(header_map),
        message_id=extract_message_id(header_map),
        text=content.text,
        html=content.html,
        raw_size_bytes=len(raw_bytes),
        encoding_detected=encoding,
        parser_version=PARSER_VERSION,
    )

    logger.debug(
        "Email decoded",
        message_id=parsed.message_id,
        has_text=parsed.text is not None,
        has_html=parsed.html is not None,
        headers_count=len(parsed.headers),
    )
    return parsed


def parse_eml_file(eml_path: str, **kwargs) -> ParsedEmail:
    """
    Decode an .eml file from disk.

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    with open(eml_path, "rb") as f:
        eml_bytes = f.read()
    return parse_inbound_email(eml_bytes, **kwargs)
