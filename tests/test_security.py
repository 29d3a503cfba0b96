"""Unit tests for cloudcore.core.security: password schemes, token issuance and verification."""

import base64
import json
import time
import unittest
from types import SimpleNamespace

import jwt

from cloudcore.core.security import (
    BOOTSTRAP_PASSWORD,
    BOOTSTRAP_PASSWORD_HASH,
    TOKEN_LIFETIME_SECONDS,
    InvalidSignatureError,
    MalformedTokenError,
    TokenError,
    TokenExpiredError,
    hash_password,
    issue_token,
    verify_password,
    verify_token,
)

SECRET = "unit-test-secret-0123456789abcdef-0123"
NOW = 1_760_000_000


def _user(**kwargs: object) -> SimpleNamespace:
    """Build a minimal token subject for tests."""
    defaults = {"id": "5b6f0c1e-0000-4000-8000-000000000001", "email": "ops@example.com", "role": "operator"}
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def _b64url_json(segment: str) -> dict:
    return json.loads(base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4)))


def _flip_char(segment: str, index: int) -> str:
    replacement = "A" if segment[index] != "A" else "B"
    return segment[:index] + replacement + segment[index + 1 :]


class TestBootstrapCredential(unittest.TestCase):
    """The bootstrap credential is an exact-match special case, not bcrypt."""

    def test_bootstrap_password_matches_bootstrap_hash(self) -> None:
        self.assertTrue(verify_password("admin123", BOOTSTRAP_PASSWORD_HASH))

    def test_other_password_rejected_against_bootstrap_hash(self) -> None:
        self.assertFalse(verify_password("admin124", BOOTSTRAP_PASSWORD_HASH))
        self.assertFalse(verify_password("", BOOTSTRAP_PASSWORD_HASH))

    def test_bootstrap_password_rejected_against_similar_hash(self) -> None:
        self.assertFalse(verify_password(BOOTSTRAP_PASSWORD, BOOTSTRAP_PASSWORD_HASH[:-1] + "k"))

    def test_hash_password_never_produces_bootstrap_hash(self) -> None:
        self.assertNotEqual(hash_password(BOOTSTRAP_PASSWORD), BOOTSTRAP_PASSWORD_HASH)


class TestSha256Scheme(unittest.TestCase):
    """General scheme: lowercase hex SHA-256 compared byte-for-byte."""

    def test_known_digest(self) -> None:
        self.assertEqual(
            hash_password("password"),
            "5e884898da28047151d0e56f8dc6292773603d0d6aabbdd62a11ef721d1542d8",
        )

    def test_hash_is_lowercase_hex(self) -> None:
        digest = hash_password("Zürich-Pässword")
        self.assertEqual(len(digest), 64)
        self.assertEqual(digest, digest.lower())
        int(digest, 16)

    def test_round_trip_and_mismatch(self) -> None:
        stored = hash_password("correct horse battery staple")
        self.assertTrue(verify_password("correct horse battery staple", stored))
        self.assertFalse(verify_password("correct horse battery stapl", stored))
        self.assertFalse(verify_password("Correct horse battery staple", stored))

    def test_bootstrap_plaintext_also_works_with_sha256_hash(self) -> None:
        self.assertTrue(verify_password("admin123", hash_password("admin123")))

    def test_comparison_is_case_sensitive(self) -> None:
        stored = hash_password("s3cret-pass")
        self.assertFalse(verify_password("s3cret-pass", stored.upper()))

    def test_absent_inputs_raise(self) -> None:
        with self.assertRaises(ValueError):
            verify_password("x", None)  # type: ignore[arg-type]
        with self.assertRaises(ValueError):
            verify_password("x", "")
        with self.assertRaises(ValueError):
            verify_password(None, hash_password("x"))  # type: ignore[arg-type]


class TestIssueToken(unittest.TestCase):
    """issue_token builds header.payload.signature with fixed claims and lifetime."""

    def test_three_unpadded_segments(self) -> None:
        token = issue_token(_user(), SECRET, now=NOW)
        segments = token.split(".")
        self.assertEqual(len(segments), 3)
        for segment in segments:
            self.assertNotIn("=", segment)
            self.assertNotIn("+", segment)
            self.assertNotIn("/", segment)

    def test_header_and_payload(self) -> None:
        user = _user()
        header_seg, payload_seg, _ = issue_token(user, SECRET, now=NOW).split(".")
        self.assertEqual(_b64url_json(header_seg), {"alg": "HS256", "typ": "JWT"})
        self.assertEqual(
            _b64url_json(payload_seg),
            {
                "userId": user.id,
                "email": user.email,
                "role": user.role,
                "iat": NOW,
                "exp": NOW + TOKEN_LIFETIME_SECONDS,
            },
        )
        self.assertEqual(TOKEN_LIFETIME_SECONDS, 86400)

    def test_same_second_same_token(self) -> None:
        self.assertEqual(
            issue_token(_user(), SECRET, now=NOW),
            issue_token(_user(), SECRET, now=NOW),
        )

    def test_different_second_different_token(self) -> None:
        self.assertNotEqual(
            issue_token(_user(), SECRET, now=NOW),
            issue_token(_user(), SECRET, now=NOW + 1),
        )

    def test_empty_secret_rejected(self) -> None:
        with self.assertRaises(ValueError):
            issue_token(_user(), "", now=NOW)


class TestVerifyToken(unittest.TestCase):
    """verify_token recovers claims or raises one of the three token errors."""

    def test_round_trip_with_current_clock(self) -> None:
        user = _user(role="admin")
        payload = verify_token(issue_token(user, SECRET), SECRET)
        self.assertEqual(payload["userId"], user.id)
        self.assertEqual(payload["email"], user.email)
        self.assertEqual(payload["role"], user.role)
        self.assertEqual(payload["exp"] - payload["iat"], TOKEN_LIFETIME_SECONDS)

    def test_valid_until_exp_inclusive(self) -> None:
        token = issue_token(_user(), SECRET, now=NOW)
        payload = verify_token(token, SECRET, now=NOW + TOKEN_LIFETIME_SECONDS)
        self.assertEqual(payload["exp"], NOW + TOKEN_LIFETIME_SECONDS)

    def test_issued_ahead_of_local_clock_is_valid(self) -> None:
        ahead = int(time.time()) + 120
        token = issue_token(_user(), SECRET, now=ahead)
        self.assertEqual(verify_token(token, SECRET, now=ahead)["iat"], ahead)

    def test_injected_far_future_clock_is_used(self) -> None:
        future = 4_000_000_000
        token = issue_token(_user(), SECRET, now=future)
        self.assertEqual(verify_token(token, SECRET, now=future + 60)["exp"], future + TOKEN_LIFETIME_SECONDS)

    def test_expired_one_second_after_exp(self) -> None:
        token = issue_token(_user(), SECRET, now=NOW)
        with self.assertRaises(TokenExpiredError):
            verify_token(token, SECRET, now=NOW + TOKEN_LIFETIME_SECONDS + 1)

    def test_expired_against_current_clock(self) -> None:
        token = issue_token(_user(), SECRET, now=NOW - 2 * TOKEN_LIFETIME_SECONDS)
        with self.assertRaises(TokenExpiredError):
            verify_token(token, SECRET)

    def test_any_payload_character_flip_is_invalid_signature(self) -> None:
        header_seg, payload_seg, sig_seg = issue_token(_user(), SECRET, now=NOW).split(".")
        for index in range(len(payload_seg)):
            with self.subTest(index=index):
                tampered = ".".join([header_seg, _flip_char(payload_seg, index), sig_seg])
                with self.assertRaises(InvalidSignatureError):
                    verify_token(tampered, SECRET, now=NOW)

    def test_wrong_secret_is_invalid_signature(self) -> None:
        token = issue_token(_user(), SECRET, now=NOW)
        with self.assertRaises(InvalidSignatureError):
            verify_token(token, SECRET + "-other", now=NOW)

    def test_signature_checked_before_expiry(self) -> None:
        token = issue_token(_user(), SECRET, now=NOW)
        with self.assertRaises(InvalidSignatureError):
            verify_token(token, "another-secret-0123456789abcdef-xyz", now=NOW + 10 * TOKEN_LIFETIME_SECONDS)

    def test_too_few_segments_is_malformed(self) -> None:
        header_seg, payload_seg, _ = issue_token(_user(), SECRET, now=NOW).split(".")
        for token in ("", "abc", f"{header_seg}.{payload_seg}", f"simple.{payload_seg}"):
            with self.subTest(token=token):
                with self.assertRaises(MalformedTokenError):
                    verify_token(token, SECRET, now=NOW)

    def test_undecodable_segments_are_malformed(self) -> None:
        with self.assertRaises(MalformedTokenError):
            verify_token("a.b.c", SECRET, now=NOW)

    def test_missing_identity_claim_is_malformed(self) -> None:
        token = jwt.encode(
            {"email": "ops@example.com", "role": "viewer", "iat": NOW, "exp": NOW + 60},
            SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(MalformedTokenError):
            verify_token(token, SECRET, now=NOW)

    def test_missing_exp_is_malformed(self) -> None:
        token = jwt.encode(
            {"userId": "u1", "email": "ops@example.com", "role": "viewer", "iat": NOW},
            SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(MalformedTokenError):
            verify_token(token, SECRET, now=NOW)

    def test_errors_share_base_class(self) -> None:
        for cls in (MalformedTokenError, InvalidSignatureError, TokenExpiredError):
            self.assertTrue(issubclass(cls, TokenError))


if __name__ == "__main__":
    unittest.main()
