"""
Admin authentication guard.

The guard only understands the ``Authorization: Bearer <token>`` shape; the
token itself is handed to a TokenVerifier, which either returns a verified
Identity or raises TokenVerificationError carrying an AuthFailure. Vendor
error vocabularies are mapped into AuthFailure inside the verifiers.
"""

from __future__ import annotations

import hmac
import logging
from typing import Any, Iterable, Optional, Protocol

from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions

from portfolio.validation import is_valid_email
from shared.types import AuthFailure, Identity

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "

AUTH_FAILURE_MESSAGES = {
    AuthFailure.INVALID_EMAIL: "Invalid email address.",
    AuthFailure.USER_DISABLED: "This account has been disabled.",
    AuthFailure.WRONG_CREDENTIAL: "Invalid email or password.",
    AuthFailure.TOO_MANY_ATTEMPTS: "Too many failed login attempts. Please try again later.",
    AuthFailure.UNKNOWN: "Failed to login. Please try again.",
}


def describe_auth_failure(failure: AuthFailure) -> str:
    """User-facing message for an authentication failure."""
    return AUTH_FAILURE_MESSAGES.get(failure, AUTH_FAILURE_MESSAGES[AuthFailure.UNKNOWN])


class TokenVerificationError(Exception):
    def __init__(self, failure: AuthFailure):
        super().__init__(failure.value)
        self.failure = failure


class TokenVerifier(Protocol):
    def verify(self, token: str) -> Identity:
        ...


class FirebaseTokenVerifier:
    """Verifies Firebase Auth ID tokens."""

    def __init__(self, app: Any = None, check_revoked: bool = True):
        self._app = app
        self._check_revoked = check_revoked

    def verify(self, token: str) -> Identity:
        try:
            claims = firebase_auth.verify_id_token(
                token, app=self._app, check_revoked=self._check_revoked
            )
        except firebase_auth.UserDisabledError as e:
            raise TokenVerificationError(AuthFailure.USER_DISABLED) from e
        except firebase_auth.InvalidIdTokenError as e:
            # Also covers expired and revoked tokens.
            raise TokenVerificationError(AuthFailure.WRONG_CREDENTIAL) from e
        except firebase_exceptions.ResourceExhaustedError as e:
            raise TokenVerificationError(AuthFailure.TOO_MANY_ATTEMPTS) from e
        except ValueError as e:
            raise TokenVerificationError(AuthFailure.WRONG_CREDENTIAL) from e
        except firebase_exceptions.FirebaseError as e:
            raise TokenVerificationError(AuthFailure.UNKNOWN) from e
        return Identity(uid=claims["uid"], email=claims.get("email"), claims=dict(claims))


class StaticTokenVerifier:
    """
    Verifies against a fixed token table. Meant for local development and
    tests, configured through ADMIN_TOKENS.
    """

    def __init__(self, tokens: dict[str, Identity]):
        self._tokens = dict(tokens)

    @classmethod
    def from_spec(cls, spec: str) -> "StaticTokenVerifier":
        """Parses comma-separated ``token:uid[:email]`` entries."""
        tokens: dict[str, Identity] = {}
        for entry in spec.split(","):
            parts = [p.strip() for p in entry.split(":")]
            if len(parts) < 2 or not parts[0] or not parts[1]:
                continue
            email = parts[2] if len(parts) > 2 and parts[2] else None
            tokens[parts[0]] = Identity(uid=parts[1], email=email)
        return cls(tokens)

    def verify(self, token: str) -> Identity:
        for known, identity in self._tokens.items():
            if hmac.compare_digest(known.encode(), token.encode()):
                return identity
        raise TokenVerificationError(AuthFailure.WRONG_CREDENTIAL)


class AuthGuard:
    """
    Authenticates admin requests. Every call verifies independently; nothing
    is cached between requests.
    """

    def __init__(self, verifier: TokenVerifier, admin_emails: Iterable[str] = ()):
        self._verifier = verifier
        self._admin_emails = {e.lower() for e in admin_emails}

    def authenticate(self, authorization: Optional[str]) -> Optional[Identity]:
        """Returns the verified identity, or None when the request is rejected."""
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            logger.warning("Admin authentication rejected: missing or malformed header")
            return None
        token = authorization[len(BEARER_PREFIX):].strip()
        if not token:
            logger.warning("Admin authentication rejected: empty bearer token")
            return None

        try:
            identity = self._verifier.verify(token)
        except TokenVerificationError as e:
            logger.warning("Admin authentication rejected: %s", e.failure.value)
            return None

        if self._admin_emails:
            email = (identity.email or "").lower()
            if not is_valid_email(email):
                logger.warning(
                    "Admin authentication rejected: %s", AuthFailure.INVALID_EMAIL.value
                )
                return None
            if email not in self._admin_emails:
                logger.warning(
                    "Admin authentication rejected: %s for uid %s",
                    AuthFailure.WRONG_CREDENTIAL.value,
                    identity.uid,
                )
                return None
        return identity
