"""
Identity Service — Bearer credential verification against an identity oracle.

Oracles raise AuthError with INVALID_CREDENTIAL for tokens that are expired,
tampered or revoked and ORACLE_UNAVAILABLE for transient failures. The
verifier never retries.
"""
import logging
import time
from typing import Protocol

import httpx
import jwt
from jwt.exceptions import InvalidTokenError

from portal.errors import AuthError, AuthErrorKind
from portal.utils.validators import parse_bearer

logger = logging.getLogger(__name__)


class IdentityOracle(Protocol):
    def verify_token(self, token: str) -> str:
        """Return the subject id the token was issued to."""
        ...


class JwtIdentityOracle:
    """Verifies HS256 tokens signed with a shared secret (local development, tests)."""

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self._secret = secret
        self._algorithm = algorithm

    def issue_token(self, subject_id: str, expires_in: int = 3600, **claims) -> str:
        now = int(time.time())
        payload = {"sub": subject_id, "iat": now, "exp": now + expires_in, **claims}
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify_token(self, token: str) -> str:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except InvalidTokenError as exc:
            raise AuthError(AuthErrorKind.INVALID_CREDENTIAL, type(exc).__name__) from exc

        subject = str(claims.get("sub") or "").strip()
        if not subject:
            raise AuthError(AuthErrorKind.INVALID_CREDENTIAL, "token has no subject")
        return subject


class HttpIdentityOracle:
    """Delegates verification to a remote token-introspection endpoint.

    POST {url} with {"token": ...}; a 2xx response must carry the subject as
    `uid` or `sub`.
    """

    REJECTED_STATUSES = {400, 401, 403}

    def __init__(self, url: str, *, api_key: str = "", timeout: float = 5.0,
                 client: httpx.Client | None = None):
        self._url = url
        self._api_key = api_key
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout))

    def verify_token(self, token: str) -> str:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["X-Api-Key"] = self._api_key
        try:
            resp = self._client.post(self._url, json={"token": token}, headers=headers)
        except httpx.HTTPError as exc:
            raise AuthError(AuthErrorKind.ORACLE_UNAVAILABLE, type(exc).__name__) from exc

        if resp.status_code in self.REJECTED_STATUSES:
            raise AuthError(AuthErrorKind.INVALID_CREDENTIAL, f"oracle rejected token ({resp.status_code})")
        if resp.status_code >= 300:
            raise AuthError(AuthErrorKind.ORACLE_UNAVAILABLE, f"oracle returned {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as exc:
            raise AuthError(AuthErrorKind.ORACLE_UNAVAILABLE, "oracle returned non-JSON body") from exc

        subject = str(body.get("uid") or body.get("sub") or "").strip() if isinstance(body, dict) else ""
        if not subject:
            raise AuthError(AuthErrorKind.INVALID_CREDENTIAL, "oracle returned no subject")
        return subject

    def close(self):
        self._client.close()


class IdentityVerifier:
    """Resolves an Authorization header to a subject id."""

    def __init__(self, oracle: IdentityOracle):
        self._oracle = oracle

    def verify(self, authorization: str | None) -> str:
        token = parse_bearer(authorization)
        if token is None:
            raise AuthError(AuthErrorKind.MISSING_CREDENTIAL)
        try:
            return self._oracle.verify_token(token)
        except AuthError as exc:
            logger.info("Credential verification failed: %s", exc.kind.value)
            raise
