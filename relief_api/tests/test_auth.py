import time
import unittest

import jwt
from pydantic import ValidationError

from relief_api.auth import (
    decode_token,
    hash_password,
    issue_token,
    login,
    register,
    verify_password,
)
from relief_api.config import Settings, parse_expires_in
from relief_api.db import InMemoryDbClient
from relief_api.errors import BadRequestError, ConflictError, UnauthorizedError


class AuthTests(unittest.TestCase):
    def setUp(self):
        self.settings = Settings(
            jwt_secret="unit-secret", jwt_expires_in="10m", bcrypt_rounds=4
        )
        self.db = InMemoryDbClient()

    def test_parse_expires_in(self):
        self.assertEqual(parse_expires_in(90), 90)
        self.assertEqual(parse_expires_in("90"), 90)
        self.assertEqual(parse_expires_in("10m"), 600)
        self.assertEqual(parse_expires_in("30 minutes"), 1800)
        self.assertEqual(parse_expires_in("2h"), 7200)
        self.assertEqual(parse_expires_in("2 hours"), 7200)
        self.assertEqual(parse_expires_in("1.5h"), 5400)
        self.assertEqual(parse_expires_in("1d"), 86400)
        self.assertEqual(parse_expires_in("7 days"), 604800)
        self.assertEqual(parse_expires_in("2w"), 1209600)
        self.assertEqual(parse_expires_in("1y"), 31557600)
        self.assertEqual(parse_expires_in("5000ms"), 5)
        for bad in ("soon", "10 fortnights", "", "0", "500ms"):
            with self.assertRaises(ValueError):
                parse_expires_in(bad)

    def test_settings_parse_lifetime_at_startup(self):
        self.assertEqual(self.settings.jwt_expires_in, 600)
        self.assertEqual(Settings(jwt_expires_in="1y").jwt_expires_in, 31557600)
        self.assertEqual(Settings().jwt_expires_in, 86400)
        with self.assertRaises(ValidationError):
            Settings(jwt_expires_in="2 fortnights")

    def test_hash_and_verify(self):
        hashed = hash_password("hunter2", rounds=4)
        self.assertNotEqual(hashed, "hunter2")
        self.assertTrue(verify_password("hunter2", hashed))
        self.assertFalse(verify_password("hunter3", hashed))
        self.assertFalse(verify_password("hunter2", "plain-text"))

    def test_hashes_are_salted(self):
        self.assertNotEqual(
            hash_password("same", rounds=4), hash_password("same", rounds=4)
        )

    def test_token_expires_after_lifetime(self):
        issued = issue_token("a@x.com", self.settings, now=time.time() - 601)
        with self.assertRaises(UnauthorizedError) as ctx:
            decode_token(issued, self.settings)
        self.assertEqual(ctx.exception.message, "Token expired")

        fresh = issue_token("a@x.com", self.settings)
        self.assertEqual(decode_token(fresh, self.settings)["email"], "a@x.com")

    def test_token_signed_with_other_secret_is_rejected(self):
        forged = jwt.encode(
            {"email": "a@x.com", "exp": int(time.time()) + 60}, "other", algorithm="HS256"
        )
        with self.assertRaises(UnauthorizedError):
            decode_token(forged, self.settings)

    def test_token_without_expiry_is_rejected(self):
        unbounded = jwt.encode({"email": "a@x.com"}, "unit-secret", algorithm="HS256")
        with self.assertRaises(UnauthorizedError) as ctx:
            decode_token(unbounded, self.settings)
        self.assertEqual(ctx.exception.message, "Invalid token")

        anonymous = jwt.encode(
            {"exp": int(time.time()) + 60}, "unit-secret", algorithm="HS256"
        )
        with self.assertRaises(UnauthorizedError):
            decode_token(anonymous, self.settings)

    def test_password_is_required(self):
        for password in (None, ""):
            with self.assertRaises(BadRequestError):
                register(
                    self.db, self.settings, name="A", email="a@x.com", password=password
                )
            with self.assertRaises(BadRequestError):
                login(self.db, self.settings, email="a@x.com", password=password)
        self.assertEqual(self.db.list_users(), [])

    def test_register_then_login(self):
        register(self.db, self.settings, name="A", email="a@x.com", password="p")
        with self.assertRaises(ConflictError):
            register(self.db, self.settings, name="B", email="a@x.com", password="q")

        token = login(self.db, self.settings, email="a@x.com", password="p")
        self.assertEqual(decode_token(token, self.settings)["email"], "a@x.com")

        with self.assertRaises(UnauthorizedError) as ctx:
            login(self.db, self.settings, email="a@x.com", password="q")
        self.assertEqual(ctx.exception.message, "Invalid email or password")


if __name__ == "__main__":
    unittest.main()
