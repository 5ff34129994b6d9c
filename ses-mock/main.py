"""
SES Mock
========
Language  : Python
Framework : Flask + Gunicorn

A local stand-in for Amazon SES. Clients point their SES endpoint here; sends
are validated, recorded in memory and answered like the real service, and no
mail ever leaves the process.

  auth.py       - Authorization header gate
  schemas.py    - Per-operation request shapes + structural validator
  wire.py       - Indexed-field / nested-JSON / MIME decoders
  templates.py  - Template loading and {{placeholder}} substitution
  pipeline.py   - Send operation handlers
  store.py      - In-memory email store
  protocol.py   - XML / JSON response bodies

HTTP surface:
  GET  /                          landing page
  POST /clear-store               empty the store
  GET  /store[?since=<epoch s>]   recorded emails
  GET  /health-check              liveness
  POST /                          v1 query API, dispatched on Action   (auth)
  POST /v2/email/outbound-emails  v2 SendEmail                         (auth)
"""

import logging
import os
import re
import uuid

from flask import Blueprint, Flask, Response, current_app, jsonify, request, send_from_directory

import auth
import pipeline
import protocol
from config import Config
from schemas import Action
from store import EmailStore

config = Config.from_env()

logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format='%(asctime)s [ses-mock] %(levelname)s %(message)s'
)
log = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'static')

PUBLIC_ENDPOINTS = {"ses.index", "ses.clear_store", "ses.get_store", "ses.health_check"}

INTEGER_PATTERN = re.compile(r'^-?\d+$')

ses = Blueprint('ses', __name__)


def _email_store() -> EmailStore:
    return current_app.extensions['ses_store']


def _config() -> Config:
    return current_app.extensions['ses_config']


def _xml(body: str, status: int) -> Response:
    return Response(body, status=status, mimetype=protocol.XML_CONTENT_TYPE)


# ── Authentication gate ───────────────────────────────────────────────────────

@ses.before_app_request
def require_authorization():
    # Unmatched routes have no endpoint and are gated too.
    if request.endpoint in PUBLIC_ENDPOINTS:
        return None
    result = auth.check(request.headers.get('authorization'))
    if not result.authorized:
        return jsonify(protocol.error_payload(result.message, result.detail)), result.status
    return None


# ── Store + service routes (no auth) ──────────────────────────────────────────

@ses.route('/', methods=['GET'])
def index():
    return send_from_directory(STATIC_DIR, 'index.html')


@ses.route('/clear-store', methods=['POST'])
def clear_store():
    _email_store().clear()
    return jsonify({"message": "Emails cleared"})


@ses.route('/store', methods=['GET'])
def get_store():
    values = request.args.getlist('since')
    if not values or values == ['']:
        return jsonify(_email_store().to_dict())

    if len(values) > 1:
        return jsonify({"message": "Bad since query param, expected single value"}), 400

    raw = values[0]
    if not INTEGER_PATTERN.match(raw) or str(int(raw)) != raw:
        return jsonify({
            "message": "Bad since query param, expected integer representing epoch timestamp in seconds"
        }), 400

    return jsonify(_email_store().to_dict(since=int(raw)))


@ses.route('/health-check', methods=['GET'])
def health_check():
    return '', 200


# ── v1 query API ──────────────────────────────────────────────────────────────

def _legacy_fields() -> dict:
    """Form-encoded as sent by the AWS SDKs; a JSON object body is accepted too."""
    if request.form:
        return request.form.to_dict()
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


@ses.route('/', methods=['POST'])
def legacy():
    fields = _legacy_fields()
    requested = fields.get('Action')
    action = Action.parse(requested)
    request_id = str(uuid.uuid4())

    if action is Action.UNKNOWN:
        log.warning(f"Action {requested!r} not supported: answering InvalidAction")
        return _xml(protocol.invalid_action_xml(str(requested), request_id), 400)

    handler = pipeline.LEGACY_HANDLERS[action]
    try:
        result = handler(fields, _email_store(), _config())
    except Exception as e:
        log.exception(f"Error calling {action.value}: {e}")
        return _xml(protocol.internal_error_xml(str(e)), 500)

    if result.status == "rejected":
        return jsonify(protocol.schema_failure_payload(result.errors)), 404

    return _xml(protocol.send_response_xml(action.value, result.message_id, request_id), 200)


# ── v2 API ────────────────────────────────────────────────────────────────────

@ses.route('/v2/email/outbound-emails', methods=['POST'])
def outbound_emails():
    body = request.get_json(silent=True)
    try:
        result = pipeline.send_email_v2(body, _email_store(), _config())
    except Exception as e:
        log.exception(f"Error calling v2 SendEmail: {e}")
        return jsonify(protocol.error_payload("InternalFailure", str(e))), 500

    if result.status == "rejected":
        return jsonify(protocol.schema_failure_payload(result.errors)), 404

    return jsonify({"MessageId": result.message_id})


# ── Fallback ──────────────────────────────────────────────────────────────────

@ses.app_errorhandler(404)
@ses.app_errorhandler(405)
def unknown_operation(error):
    return _xml(protocol.UNKNOWN_OPERATION_XML, 404)


def create_app(app_config: Config | None = None) -> Flask:
    """Build an app with its own empty store."""
    app_config = app_config or config
    app = Flask(__name__, static_folder=None)
    app.config['MAX_CONTENT_LENGTH'] = app_config.max_body_mb * 1024 * 1024
    app.extensions['ses_config'] = app_config
    app.extensions['ses_store'] = EmailStore()
    app.register_blueprint(ses)
    return app


app = create_app(config)


if __name__ == '__main__':
    templates_location = config.summary()
    log.info(f"SES mock starting on :{config.port}")
    log.info(f"  Templates: {templates_location['location']} (strategy={templates_location['strategy']})")
    log.info("  Delivery:  none (emails are only recorded in memory)")
    app.run(host='0.0.0.0', port=config.port, threaded=True)
