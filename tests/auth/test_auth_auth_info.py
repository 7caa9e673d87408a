import unittest

from odgate.auth import AuthInfo
from odgate.auth.auth_info import DEFAULT_AUTHORITY


class TestAuthInfo(unittest.TestCase):
    def test_auth_info_valid_msal(self) -> None:
        info = AuthInfo(
            kind="msal",
            data={
                "client_id": "cid",
                "token_cache_file": "/tmp/msal_cache.json",
            },
        )
        self.assertEqual(info.client_id, "cid")
        self.assertEqual(info.authority, DEFAULT_AUTHORITY)
        self.assertIsNone(info.client_secret)

    def test_auth_info_confidential_client(self) -> None:
        info = AuthInfo(
            kind="msal",
            data={
                "client_id": "cid",
                "token_cache_file": "/tmp/msal_cache.json",
                "authority": "https://login.microsoftonline.com/tenant",
                "client_secret": "s3cret",
            },
        )
        self.assertEqual(info.authority, "https://login.microsoftonline.com/tenant")
        self.assertEqual(info.client_secret, "s3cret")

    def test_auth_info_invalid_kind(self) -> None:
        with self.assertRaises(ValueError):
            AuthInfo(kind="oauth", data={})

    def test_auth_info_missing_keys(self) -> None:
        with self.assertRaises(ValueError):
            AuthInfo(kind="msal", data={"client_id": "cid"})

    def test_auth_info_blank_optional_value(self) -> None:
        with self.assertRaises(ValueError):
            AuthInfo(
                kind="msal",
                data={"client_id": "cid", "token_cache_file": "/tmp/c.json", "client_secret": " "},
            )

    def test_auth_info_data_must_be_dict(self) -> None:
        with self.assertRaises(TypeError):
            AuthInfo(kind="msal", data=[])  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
