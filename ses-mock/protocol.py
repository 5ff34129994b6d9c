"""
protocol.py - Response Bodies
==============================
Legacy (v1) answers are XML in the SES 2010-12-01 namespace. v2 answers and
all gate/validation failures are JSON payloads {message, detail}.
"""

from xml.sax.saxutils import escape

SES_NAMESPACE = "http://ses.amazonaws.com/doc/2010-12-01/"
XML_CONTENT_TYPE = "text/xml"

DETAIL_PREFIX = "aws-ses-v2-local"

UNKNOWN_OPERATION_XML = "<UnknownOperationException/>"


def send_response_xml(action: str, message_id: str, request_id: str) -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<{action}Response xmlns="{SES_NAMESPACE}">
  <{action}Result>
    <MessageId>{escape(message_id)}</MessageId>
  </{action}Result>
  <ResponseMetadata>
    <RequestId>{escape(request_id)}</RequestId>
  </ResponseMetadata>
</{action}Response>"""


def internal_error_xml(message: str) -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<Error>
  <Code>500</Code>
  <Message>{escape(message)}</Message>
</Error>"""


def invalid_action_xml(action: str, request_id: str) -> str:
    message = f"{DETAIL_PREFIX}: Action {action!r} is not supported"
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<ErrorResponse xmlns="{SES_NAMESPACE}">
  <Error>
    <Type>Sender</Type>
    <Code>InvalidAction</Code>
    <Message>{escape(message)}</Message>
  </Error>
  <RequestId>{escape(request_id)}</RequestId>
</ErrorResponse>"""


def error_payload(message: str, detail: str) -> dict:
    return {"message": message, "detail": f"{DETAIL_PREFIX}: {detail}"}


def schema_failure_payload(errors: list[str]) -> dict:
    return error_payload("Bad Request Exception", "Schema validation failed: " + "; ".join(errors))
