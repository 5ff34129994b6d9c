"""
schemas.py - Operation Schema Registry
=======================================
Declares the accepted request shape of every supported operation and checks
bodies against it with one structural validator.

Validation is type-level only: required fields present, fields of the
declared type, and the Action discriminator matching its literal pattern.
Address syntax, list bounds and cross-field rules are not checked here.

Legacy (query protocol) fields are flat keys that contain dots literally,
e.g. "Destination.ToAddresses.member.1". v2 fields are nested JSON. Both are
described by a key path, so one walker serves both.

Adding an operation: add an Action member and a SCHEMAS entry.
"""

import re
from dataclasses import dataclass, field
from enum import Enum


class Action(str, Enum):
    SEND_EMAIL           = "SendEmail"
    SEND_RAW_EMAIL       = "SendRawEmail"
    SEND_TEMPLATED_EMAIL = "SendTemplatedEmail"
    UNKNOWN              = "Unknown"

    @classmethod
    def parse(cls, value) -> "Action":
        for action in cls:
            if action is not cls.UNKNOWN and action.value == value:
                return action
        return cls.UNKNOWN


@dataclass
class FieldSpec:
    path:    tuple[str, ...]
    type:    str                # "string" | "object" | "array"
    pattern: str | None = None
    items:   str | None = None  # element type for arrays


@dataclass
class OperationSchema:
    name:     str
    fields:   list[FieldSpec]
    required: list[tuple[str, ...]] = field(default_factory=list)


def _flat(name: str, type_: str = "string", pattern: str | None = None) -> FieldSpec:
    return FieldSpec(path=(name,), type=type_, pattern=pattern)


def _nested(dotted: str, type_: str, items: str | None = None) -> FieldSpec:
    return FieldSpec(path=tuple(dotted.split('.')), type=type_, items=items)


# ── Legacy schemas ────────────────────────────────────────────────────────────

_LEGACY_ADDRESSING = [
    _flat("Destination.ToAddresses.member.1"),
    _flat("Destination.CcAddresses.member.1"),
    _flat("Destination.BccAddresses.member.1"),
    _flat("ReplyToAddresses.member.1"),
]

SCHEMAS: dict[Action, OperationSchema] = {

    Action.SEND_EMAIL: OperationSchema(
        name="SendEmail",
        fields=[
            _flat("Action", pattern="^SendEmail$"),
            _flat("Version"),
            _flat("ConfigurationSetName"),
            *_LEGACY_ADDRESSING,
            _flat("Message.Subject.Data"),
            _flat("Message.Subject.Charset"),
            _flat("Message.Body.Text.Data"),
            _flat("Message.Body.Text.Charset"),
            _flat("Message.Body.Html.Data"),
            _flat("Message.Body.Html.Charset"),
            _flat("ReturnPath"),
            _flat("ReturnPathArn"),
            _flat("Source"),
            _flat("SourceArn"),
            _flat("Tags.member.1"),
        ],
        required=[("Action",), ("Source",), ("Message.Subject.Data",)],
    ),

    # Only the blob's presence is checked; MIME parsing happens in wire.py.
    Action.SEND_RAW_EMAIL: OperationSchema(
        name="SendRawEmail",
        fields=[
            _flat("Action", pattern="^SendRawEmail$"),
            _flat("Version"),
            _flat("ConfigurationSetName"),
            _flat("Destinations.member.1"),
            _flat("FromArn"),
            _flat("RawMessage.Data"),
            _flat("ReturnPathArn"),
            _flat("Source"),
            _flat("SourceArn"),
            _flat("Tags.member.1"),
        ],
        required=[("Action",), ("RawMessage.Data",)],
    ),

    Action.SEND_TEMPLATED_EMAIL: OperationSchema(
        name="SendTemplatedEmail",
        fields=[
            _flat("Action", pattern="^SendTemplatedEmail$"),
            _flat("Version"),
            _flat("ConfigurationSetName"),
            *_LEGACY_ADDRESSING,
            _flat("ReturnPath"),
            _flat("ReturnPathArn"),
            _flat("Source"),
            _flat("SourceArn"),
            _flat("Tags.member.1"),
            _flat("Template"),
            _flat("TemplateArn"),
            _flat("TemplateData"),
        ],
        required=[("Action",), ("Source",), ("Template",), ("TemplateData",)],
    ),
}


# ── v2 schema ─────────────────────────────────────────────────────────────────

V2_SEND_EMAIL = OperationSchema(
    name="v2 SendEmail",
    fields=[
        _nested("FromEmailAddress", "string"),
        _nested("FromEmailAddressIdentityArn", "string"),
        _nested("ConfigurationSetName", "string"),
        _nested("Destination", "object"),
        _nested("Destination.ToAddresses", "array", items="string"),
        _nested("Destination.CcAddresses", "array", items="string"),
        _nested("Destination.BccAddresses", "array", items="string"),
        _nested("ReplyToAddresses", "array", items="string"),
        _nested("FeedbackForwardingEmailAddress", "string"),
        _nested("Content", "object"),
        _nested("Content.Simple", "object"),
        _nested("Content.Simple.Subject", "object"),
        _nested("Content.Simple.Subject.Data", "string"),
        _nested("Content.Simple.Body", "object"),
        _nested("Content.Simple.Body.Text", "object"),
        _nested("Content.Simple.Body.Text.Data", "string"),
        _nested("Content.Simple.Body.Html", "object"),
        _nested("Content.Simple.Body.Html.Data", "string"),
        _nested("Content.Raw", "object"),
        _nested("Content.Raw.Data", "string"),
        _nested("Content.Template", "object"),
        _nested("Content.Template.TemplateName", "string"),
        _nested("Content.Template.TemplateArn", "string"),
        _nested("Content.Template.TemplateData", "string"),
        _nested("EmailTags", "array"),
    ],
    required=[("Content",)],
)


# ── Validation ────────────────────────────────────────────────────────────────

_MISSING = object()

_TYPE_CHECKS = {
    "string": lambda v: isinstance(v, str),
    "object": lambda v: isinstance(v, dict),
    "array":  lambda v: isinstance(v, list),
}


def _lookup(body: dict, path: tuple[str, ...]):
    node = body
    for key in path:
        if not isinstance(node, dict) or key not in node:
            return _MISSING
        node = node[key]
    return node


def validate(schema: OperationSchema, body) -> list[str]:
    """Returns list of validation errors. Empty list = valid."""
    if not isinstance(body, dict):
        return [f"{schema.name}: request body must be an object"]

    errors = []
    for path in schema.required:
        if _lookup(body, path) is _MISSING:
            errors.append(f"Missing required field: '{'.'.join(path)}'")

    for spec in schema.fields:
        value = _lookup(body, spec.path)
        if value is _MISSING:
            continue
        name = '.'.join(spec.path)
        if not _TYPE_CHECKS[spec.type](value):
            errors.append(f"Field '{name}' must be of type {spec.type}")
            continue
        if spec.items and not all(_TYPE_CHECKS[spec.items](item) for item in value):
            errors.append(f"Field '{name}' must contain only {spec.items} items")
            continue
        if spec.pattern and not re.search(spec.pattern, value):
            errors.append(f"Field '{name}' must match pattern {spec.pattern}")
    return errors
