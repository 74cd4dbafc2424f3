import unittest
from unittest.mock import patch

from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions

from portfolio.auth import (
    AuthGuard,
    FirebaseTokenVerifier,
    StaticTokenVerifier,
    TokenVerificationError,
    describe_auth_failure,
)
from shared.types import AuthFailure, Identity


class StaticTokenVerifierTests(unittest.TestCase):
    def test_from_spec(self):
        verifier = StaticTokenVerifier.from_spec(
            "tok1:uid1:admin@example.com, tok2:uid2, broken, :nouid"
        )
        self.assertEqual(verifier.verify("tok1"), Identity("uid1", "admin@example.com"))
        self.assertEqual(verifier.verify("tok2"), Identity("uid2", None))
        with self.assertRaises(TokenVerificationError) as ctx:
            verifier.verify("broken")
        self.assertEqual(ctx.exception.failure, AuthFailure.WRONG_CREDENTIAL)

    def test_empty_spec_rejects_everything(self):
        with self.assertRaises(TokenVerificationError):
            StaticTokenVerifier.from_spec("").verify("anything")


class AuthGuardTests(unittest.TestCase):
    def setUp(self):
        self.verifier = StaticTokenVerifier(
            {
                "good": Identity(uid="u1", email="Admin@Example.com"),
                "other": Identity(uid="u2", email="someone@example.com"),
                "no-email": Identity(uid="u3"),
            }
        )

    def test_header_shapes(self):
        guard = AuthGuard(self.verifier)
        self.assertEqual(guard.authenticate("Bearer good").uid, "u1")
        for header in (None, "", "good", "bearer good", "Bearer ", "Bearer   ", "Token good"):
            with self.assertLogs("portfolio.auth", level="WARNING"):
                self.assertIsNone(guard.authenticate(header), header)

    def test_rejected_token_is_logged(self):
        guard = AuthGuard(self.verifier)
        with self.assertLogs("portfolio.auth", level="WARNING") as logs:
            self.assertIsNone(guard.authenticate("Bearer bad"))
        self.assertIn("WRONG_CREDENTIAL", logs.output[0])

    def test_admin_email_allow_list(self):
        guard = AuthGuard(self.verifier, admin_emails=["admin@example.com"])
        self.assertEqual(guard.authenticate("Bearer good").uid, "u1")
        with self.assertLogs("portfolio.auth", level="WARNING"):
            self.assertIsNone(guard.authenticate("Bearer other"))
        with self.assertLogs("portfolio.auth", level="WARNING") as logs:
            self.assertIsNone(guard.authenticate("Bearer no-email"))
        self.assertIn("INVALID_EMAIL", logs.output[0])

    def test_failure_messages(self):
        self.assertEqual(
            describe_auth_failure(AuthFailure.WRONG_CREDENTIAL), "Invalid email or password."
        )
        self.assertEqual(
            describe_auth_failure(AuthFailure.UNKNOWN), "Failed to login. Please try again."
        )


class FirebaseTokenVerifierTests(unittest.TestCase):
    def _failure_for(self, error):
        with patch("portfolio.auth.firebase_auth.verify_id_token", side_effect=error):
            with self.assertRaises(TokenVerificationError) as ctx:
                FirebaseTokenVerifier().verify("token")
        return ctx.exception.failure

    def test_success(self):
        claims = {"uid": "abc", "email": "a@b.co", "admin": True}
        with patch(
            "portfolio.auth.firebase_auth.verify_id_token", return_value=claims
        ) as verify:
            identity = FirebaseTokenVerifier(check_revoked=False).verify("token")
        verify.assert_called_once_with("token", app=None, check_revoked=False)
        self.assertEqual(identity.uid, "abc")
        self.assertEqual(identity.email, "a@b.co")
        self.assertTrue(identity.claims["admin"])

    def test_error_mapping(self):
        self.assertEqual(
            self._failure_for(firebase_auth.UserDisabledError("disabled")),
            AuthFailure.USER_DISABLED,
        )
        self.assertEqual(
            self._failure_for(firebase_auth.ExpiredIdTokenError("expired", cause=None)),
            AuthFailure.WRONG_CREDENTIAL,
        )
        self.assertEqual(
            self._failure_for(firebase_exceptions.ResourceExhaustedError("quota")),
            AuthFailure.TOO_MANY_ATTEMPTS,
        )
        self.assertEqual(
            self._failure_for(ValueError("malformed")), AuthFailure.WRONG_CREDENTIAL
        )
        self.assertEqual(
            self._failure_for(firebase_exceptions.UnavailableError("down")),
            AuthFailure.UNKNOWN,
        )


if __name__ == "__main__":
    unittest.main()
