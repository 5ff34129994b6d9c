"""
templates.py - Template Resolver
==================================
Loads SES-style template descriptors from disk and fills in their placeholders.

A descriptor is <name>.json:
  {
    "Subject": {"Data": "Hi {{name}}"},
    "Body": {
      "Text": {"Data": "Bye {{name}}"},
      "Html": {"Data": "<p>Bye {{name}}</p>"}
    }
  }
Either body variant may be missing.

Location (see config.py):
  TEMPLATES_PATH set  →  <TEMPLATES_MOUNT>/<TEMPLATES_PATH>/<name>.json
  otherwise           →  <TEMPLATES_DIR>/<name>.json (relative dirs resolve from ses-mock/)

A name may not resolve outside that directory.

Descriptors are read on every request, never cached, so edits show up on the
next send.

Substitution replaces every literal {{key}} with the data value. Values are
inserted verbatim: no HTML escaping. Unknown placeholders stay as they are and
unused keys are ignored.
"""

import json
import logging
import os
from dataclasses import dataclass

from config import Config

log = logging.getLogger(__name__)


class TemplateError(Exception):
    """Template could not be located, read or rendered."""


@dataclass
class TemplateContent:
    subject: str
    text:    str | None
    html:    str | None


# ── Location ──────────────────────────────────────────────────────────────────

def template_path(name: str, config: Config) -> str:
    """Descriptor path for `name`; it must stay inside the template directory."""
    if not name:
        raise TemplateError("Template name must not be empty")
    base = config.templates_location()
    path = os.path.join(base, f"{name}.json")
    real_base = os.path.realpath(base)
    if os.path.commonpath([real_base, os.path.realpath(path)]) != real_base:
        raise TemplateError(f"Invalid template name: {name!r}")
    return path


# ── Loading ───────────────────────────────────────────────────────────────────

def _data(descriptor: dict, *keys: str) -> str | None:
    node = descriptor
    for key in keys:
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]
    if node is None:
        return None
    if not isinstance(node, str):
        raise TemplateError(f"Template field {'.'.join(keys)} must be a string")
    return node


def load(name: str, config: Config) -> TemplateContent:
    path = template_path(name, config)
    try:
        with open(path, encoding='utf-8') as fh:
            descriptor = json.load(fh)
    except FileNotFoundError:
        raise TemplateError(f"Template '{name}' not found at {path}") from None
    except (OSError, ValueError) as e:
        raise TemplateError(f"Template '{name}' could not be read: {e}") from e

    if not isinstance(descriptor, dict):
        raise TemplateError(f"Template '{name}' must be a JSON object")

    subject = _data(descriptor, 'Subject', 'Data')
    if subject is None:
        raise TemplateError(f"Template '{name}' has no Subject.Data")

    log.info(f"Loaded template '{name}' from {path}")
    return TemplateContent(
        subject=subject,
        text=_data(descriptor, 'Body', 'Text', 'Data'),
        html=_data(descriptor, 'Body', 'Html', 'Data'),
    )


# ── Substitution ──────────────────────────────────────────────────────────────

def parse_template_data(raw: str) -> dict[str, str]:
    """TemplateData arrives as a JSON object string.

    Non-string values keep their JSON spelling, except that integral floats
    (1.0) are written as integers.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise TemplateError(f"TemplateData is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise TemplateError("TemplateData must be a JSON object")
    return {
        str(key): _spell(value)
        for key, value in data.items()
    }


def _spell(value) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return json.dumps(value)


def substitute(text: str | None, data: dict[str, str]) -> str | None:
    if text is None:
        return None
    for key, value in data.items():
        text = text.replace('{{' + key + '}}', value)
    return text


def render(name: str, data: dict[str, str], config: Config) -> TemplateContent:
    """Load the named template and fill in subject and both body variants."""
    content = load(name, config)
    return TemplateContent(
        subject=substitute(content.subject, data),
        text=substitute(content.text, data),
        html=substitute(content.html, data),
    )
