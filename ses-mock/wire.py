"""
wire.py - Wire Encoding Decoders
================================
SES clients describe recipients in two different shapes. Each shape has its
own decoder, and both produce the same Addressing record, so the handlers in
pipeline.py never look at the wire format.

  Indexed fields (v1 query protocol, form-encoded):
    Destination.ToAddresses.member.1=a@example.com
    Destination.ToAddresses.member.2=b@example.com

  Nested JSON (v2):
    {"Destination": {"ToAddresses": ["a@example.com", "b@example.com"]}}

Raw MIME messages (SendRawEmail, v2 Content.Raw) are decoded here as well.
"""

import base64
import binascii
import logging
from dataclasses import dataclass, field
from email import policy
from email.parser import BytesParser
from email.utils import getaddresses

log = logging.getLogger(__name__)


@dataclass
class Addressing:
    to:       list[str] = field(default_factory=list)
    cc:       list[str] = field(default_factory=list)
    bcc:      list[str] = field(default_factory=list)
    reply_to: list[str] = field(default_factory=list)


@dataclass
class ParsedMessage:
    sender:     str
    addressing: Addressing
    subject:    str
    text:       str | None
    html:       str | None


class MimeDecodeError(Exception):
    """Raw message blob is not base64 or not a parseable MIME message."""


# ── Indexed fields (v1) ───────────────────────────────────────────────────────

INDEXED_PREFIXES = {
    "to":       "Destination.ToAddresses.member.",
    "cc":       "Destination.CcAddresses.member.",
    "bcc":      "Destination.BccAddresses.member.",
    "reply_to": "ReplyToAddresses.member.",
}


def collect_indexed(fields: dict, prefix: str) -> list[str]:
    """Values of every field whose name starts with prefix, in field order."""
    return [value for key, value in fields.items() if key.startswith(prefix) and value is not None]


def decode_indexed(fields: dict) -> Addressing:
    return Addressing(**{
        name: collect_indexed(fields, prefix)
        for name, prefix in INDEXED_PREFIXES.items()
    })


# ── Nested JSON (v2) ──────────────────────────────────────────────────────────

def _address_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if item is not None]


def decode_nested(body: dict) -> Addressing:
    destination = body.get('Destination') or {}
    return Addressing(
        to=_address_list(destination.get('ToAddresses')),
        cc=_address_list(destination.get('CcAddresses')),
        bcc=_address_list(destination.get('BccAddresses')),
        reply_to=_address_list(body.get('ReplyToAddresses')),
    )


# ── Raw MIME ──────────────────────────────────────────────────────────────────

def _header_addresses(msg, name: str) -> list[str]:
    values = msg.get_all(name) or []
    return [address for _, address in getaddresses([str(v) for v in values]) if address]


def _body_part(msg, subtype: str) -> str | None:
    part = msg.get_body(preferencelist=(subtype,))
    if part is None or part.get_content_subtype() != subtype:
        return None
    try:
        return part.get_content()
    except (LookupError, UnicodeError) as e:
        log.warning(f"Could not decode text/{subtype} part, falling back to lenient decode: {e}")
        payload = part.get_payload(decode=True) or b''
        return payload.decode('utf-8', errors='replace')


def decode_mime(data: str) -> ParsedMessage:
    """Base64-decode and parse a raw RFC 5322 message. Attachments are ignored."""
    try:
        raw = base64.b64decode(data, validate=False)
    except (binascii.Error, ValueError) as e:
        raise MimeDecodeError(f"RawMessage.Data is not valid base64: {e}") from e
    if not raw.strip():
        raise MimeDecodeError("RawMessage.Data is empty")

    msg = BytesParser(policy=policy.default).parsebytes(raw)
    senders = _header_addresses(msg, 'From')

    return ParsedMessage(
        sender=senders[0] if senders else '',
        addressing=Addressing(
            to=_header_addresses(msg, 'To'),
            cc=_header_addresses(msg, 'Cc'),
            bcc=_header_addresses(msg, 'Bcc'),
            reply_to=_header_addresses(msg, 'Reply-To'),
        ),
        subject=str(msg.get('Subject', '')),
        text=_body_part(msg, 'plain'),
        html=_body_part(msg, 'html'),
    )
