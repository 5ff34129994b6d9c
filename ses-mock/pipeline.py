"""
pipeline.py - Send Operation Handlers
======================================
One handler per supported send operation. Every handler follows the same
steps, and each step before the last is a rejection point:

1. Validate the body against the operation schema
2. Decode addressing (indexed fields, nested JSON or MIME headers)
3. Resolve content (request fields, template, or raw message)
4. Append an EmailRecord to the store

Expected rejections come back as SendResult(status="rejected"). Anything
unexpected (unreadable template, undecodable MIME) raises and is turned into
an error response by the dispatcher in main.py.
"""

import logging
import uuid
from dataclasses import dataclass, field

import schemas
import templates
import wire
from config import Config
from schemas import Action
from store import Destination, EmailBody, EmailRecord, EmailStore

log = logging.getLogger(__name__)


@dataclass
class SendResult:
    status:     str            # "sent" | "rejected"
    message_id: str | None
    errors:     list[str] = field(default_factory=list)


def _reject(operation: str, errors: list[str]) -> SendResult:
    log.warning(f"{operation} rejected: {'; '.join(errors)}")
    return SendResult(status="rejected", message_id=None, errors=errors)


def new_message_id() -> str:
    return f"ses-{uuid.uuid4().hex}"


def _store(store: EmailStore, operation: str, sender: str, addressing: wire.Addressing,
           subject: str, text: str | None, html: str | None) -> SendResult:
    message_id = new_message_id()
    store.append(EmailRecord(
        message_id=message_id,
        sender=sender,
        reply_to=list(addressing.reply_to),
        destination=Destination(
            to=list(addressing.to),
            cc=list(addressing.cc),
            bcc=list(addressing.bcc),
        ),
        subject=subject,
        body=EmailBody(text=text, html=html),
        attachments=[],
    ))
    log.info(f"[{message_id}] {operation} accepted: subject='{subject}'")
    return SendResult(status="sent", message_id=message_id)


def _with_envelope(addressing: wire.Addressing, envelope: list[str]) -> wire.Addressing:
    """Envelope recipients missing from the MIME headers were blind copies."""
    listed = set(addressing.to) | set(addressing.cc) | set(addressing.bcc)
    extra = [address for address in envelope if address not in listed]
    return wire.Addressing(
        to=addressing.to,
        cc=addressing.cc,
        bcc=addressing.bcc + extra,
        reply_to=addressing.reply_to,
    )


# ── Legacy (v1) operations ────────────────────────────────────────────────────

def send_email(fields: dict, store: EmailStore, config: Config) -> SendResult:
    errors = schemas.validate(schemas.SCHEMAS[Action.SEND_EMAIL], fields)
    if errors:
        return _reject("SendEmail", errors)

    return _store(
        store, "SendEmail",
        sender=fields['Source'],
        addressing=wire.decode_indexed(fields),
        subject=fields['Message.Subject.Data'],
        text=fields.get('Message.Body.Text.Data'),
        html=fields.get('Message.Body.Html.Data'),
    )


def send_raw_email(fields: dict, store: EmailStore, config: Config) -> SendResult:
    errors = schemas.validate(schemas.SCHEMAS[Action.SEND_RAW_EMAIL], fields)
    if errors:
        return _reject("SendRawEmail", errors)

    parsed = wire.decode_mime(fields['RawMessage.Data'])
    sender = fields.get('Source') or parsed.sender
    if not sender:
        return _reject("SendRawEmail", ["Source or a From header is required"])

    envelope = wire.collect_indexed(fields, "Destinations.member.")
    return _store(
        store, "SendRawEmail",
        sender=sender,
        addressing=_with_envelope(parsed.addressing, envelope),
        subject=parsed.subject,
        text=parsed.text,
        html=parsed.html,
    )


def send_templated_email(fields: dict, store: EmailStore, config: Config) -> SendResult:
    errors = schemas.validate(schemas.SCHEMAS[Action.SEND_TEMPLATED_EMAIL], fields)
    if errors:
        return _reject("SendTemplatedEmail", errors)

    data = templates.parse_template_data(fields['TemplateData'])
    content = templates.render(fields['Template'], data, config)

    return _store(
        store, "SendTemplatedEmail",
        sender=fields['Source'],
        addressing=wire.decode_indexed(fields),
        subject=content.subject,
        text=content.text,
        html=content.html,
    )


LEGACY_HANDLERS = {
    Action.SEND_EMAIL:           send_email,
    Action.SEND_RAW_EMAIL:       send_raw_email,
    Action.SEND_TEMPLATED_EMAIL: send_templated_email,
}


# ── v2 operation ──────────────────────────────────────────────────────────────

V2_CONTENT_KINDS = ("Simple", "Raw", "Template")


def send_email_v2(body, store: EmailStore, config: Config) -> SendResult:
    errors = schemas.validate(schemas.V2_SEND_EMAIL, body)
    if errors:
        return _reject("v2 SendEmail", errors)

    content = body['Content']
    kinds = [kind for kind in V2_CONTENT_KINDS if kind in content]
    if len(kinds) != 1:
        return _reject("v2 SendEmail", ["Content must contain exactly one of Simple, Raw or Template"])
    kind = kinds[0]

    addressing = wire.decode_nested(body)
    sender = body.get('FromEmailAddress')

    if kind == "Raw":
        raw_data = (content['Raw'] or {}).get('Data')
        if not raw_data:
            return _reject("v2 SendEmail", ["Missing required field: 'Content.Raw.Data'"])
        parsed = wire.decode_mime(raw_data)
        sender = sender or parsed.sender
        if not sender:
            return _reject("v2 SendEmail", ["FromEmailAddress or a From header is required"])
        envelope = addressing.to + addressing.cc + addressing.bcc
        merged = _with_envelope(parsed.addressing, envelope)
        if addressing.reply_to:
            merged.reply_to = addressing.reply_to
        return _store(store, "v2 SendEmail", sender, merged, parsed.subject, parsed.text, parsed.html)

    if not sender:
        return _reject("v2 SendEmail", ["Missing required field: 'FromEmailAddress'"])

    if kind == "Simple":
        simple = content['Simple']
        subject = (simple.get('Subject') or {}).get('Data')
        if subject is None:
            return _reject("v2 SendEmail", ["Missing required field: 'Content.Simple.Subject.Data'"])
        message_body = simple.get('Body') or {}
        return _store(
            store, "v2 SendEmail", sender, addressing, subject,
            text=(message_body.get('Text') or {}).get('Data'),
            html=(message_body.get('Html') or {}).get('Data'),
        )

    template = content['Template']
    name = template.get('TemplateName')
    if not name:
        return _reject("v2 SendEmail", ["Missing required field: 'Content.Template.TemplateName'"])
    data = templates.parse_template_data(template.get('TemplateData', '{}'))
    rendered = templates.render(name, data, config)
    return _store(store, "v2 SendEmail", sender, addressing, rendered.subject, rendered.text, rendered.html)
