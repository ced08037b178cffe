import unittest

from jose import jwt

from app.core.security import (
    TOKEN_TYPE_ACCESS,
    TOKEN_TYPE_OAUTH_STATE,
    TOKEN_TYPE_REFRESH,
    TokenService,
)
from app.models.orm.user import ROLE_USER, User

from helpers import TEST_SECRET


def _user(email="jane@x.com"):
    return User(email=email, role=ROLE_USER, hashed_password="x", name="Jane Doe")


class TestTokenIssuing(unittest.TestCase):

    def setUp(self):
        self.service = TokenService(TEST_SECRET)

    def test_empty_secret_is_rejected(self):
        with self.assertRaises(ValueError):
            TokenService("")

    def test_access_token_validates_and_carries_subject(self):
        token = self.service.issue_access_token(_user())
        self.assertTrue(self.service.validate(token))
        self.assertTrue(self.service.validate(token, token_type=TOKEN_TYPE_ACCESS))
        self.assertEqual(self.service.subject_of(token), "jane@x.com")

    def test_claims(self):
        claims = self.service.decode(self.service.issue_refresh_token(_user()))
        self.assertEqual(claims["type"], TOKEN_TYPE_REFRESH)
        self.assertEqual(claims["role"], ROLE_USER)
        self.assertGreater(claims["exp"], claims["iat"])
        self.assertTrue(claims["jti"])

    def test_every_token_has_its_own_id(self):
        first = self.service.decode(self.service.issue_refresh_token(_user()))
        second = self.service.decode(self.service.issue_refresh_token(_user()))
        self.assertNotEqual(first["jti"], second["jti"])

    def test_state_token_has_no_subject(self):
        state = self.service.issue_state_token()
        self.assertTrue(self.service.validate(state, token_type=TOKEN_TYPE_OAUTH_STATE))
        self.assertFalse(self.service.validate(state, token_type=TOKEN_TYPE_ACCESS))


class TestTokenValidation(unittest.TestCase):

    def setUp(self):
        self.service = TokenService(TEST_SECRET)

    def test_wrong_type_is_rejected(self):
        refresh = self.service.issue_refresh_token(_user())
        self.assertFalse(self.service.validate(refresh, token_type=TOKEN_TYPE_ACCESS))

    def test_expired_token_is_rejected(self):
        expired = TokenService(TEST_SECRET, access_token_expire_minutes=-1)
        token = expired.issue_access_token(_user())
        self.assertFalse(self.service.validate(token))

    def test_other_secret_is_rejected(self):
        other = TokenService("another-secret")
        self.assertFalse(self.service.validate(other.issue_access_token(_user())))

    def test_tampered_payload_is_rejected(self):
        token = self.service.issue_access_token(_user())
        header, payload, signature = token.split(".")
        forged = jwt.encode({"sub": "mallory@x.com", "type": "access"}, "guess")
        self.assertFalse(self.service.validate(".".join([header, forged.split(".")[1], signature])))

    def test_garbage_is_rejected(self):
        for value in (None, "", "not-a-token", "a.b.c", 42):
            self.assertFalse(self.service.validate(value))

    def test_token_without_subject_is_rejected(self):
        token = jwt.encode({"type": "access", "exp": 9999999999}, TEST_SECRET, algorithm="HS256")
        self.assertFalse(self.service.validate(token, token_type=TOKEN_TYPE_ACCESS))


if __name__ == "__main__":
    unittest.main()
