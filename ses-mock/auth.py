"""
auth.py - Authentication Gate
===============================
Every SES operation must carry an Authorization header, even though the mock
never verifies signatures. Only the scheme prefix is checked, so any mock
access key works (SigV4 headers begin with "AWS4-HMAC-SHA256").

  no header            → 403 Missing Authentication Token
  header not "AWS..."  → 400 Not Authorized
  otherwise            → authorized
"""

import logging
from dataclasses import dataclass

log = logging.getLogger(__name__)

AUTH_SCHEME_PREFIX = "AWS"


@dataclass
class AuthResult:
    authorized: bool
    status:     int | None = None
    message:    str | None = None
    detail:     str | None = None


def check(authorization: str | None) -> AuthResult:
    if not authorization:
        log.warning("Rejected request: no authorization header")
        return AuthResult(
            authorized=False,
            status=403,
            message="Missing Authentication Token",
            detail="Must provide some type of authentication, even if only a mock access key",
        )

    if not authorization.startswith(AUTH_SCHEME_PREFIX):
        scheme = authorization.split(' ', 1)[0]
        log.warning(f"Rejected request: unsupported authorization scheme '{scheme}'")
        return AuthResult(
            authorized=False,
            status=400,
            message="Not Authorized",
            detail="Authorization type must be AWS",
        )

    return AuthResult(authorized=True)
