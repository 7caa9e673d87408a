import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

import requests

from odgate.auth import AuthInfo, OAuthClient
from odgate.errors import AuthError

SCOPES = ["Files.ReadWrite.All"]


def _info(tmp: str, **extra: str) -> AuthInfo:
    data = {"client_id": "cid", "token_cache_file": str(Path(tmp) / "cache" / "msal.json")}
    data.update(extra)
    return AuthInfo(kind="msal", data=data)


class TestOAuthClient(unittest.TestCase):
    def test_silent_token_from_cached_account(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            app = Mock()
            app.get_accounts.return_value = [{"username": "me"}]
            app.acquire_token_silent.return_value = {"access_token": "tok"}

            with patch("odgate.auth.oauth_client.msal.PublicClientApplication", return_value=app):
                client = OAuthClient(_info(tmp))
                token = client.get_access_token(SCOPES, interactive=False)

            self.assertEqual(token, "tok")
            app.acquire_token_silent.assert_called_once_with(SCOPES, account={"username": "me"})
            app.acquire_token_interactive.assert_not_called()

    def test_interactive_fallback_for_public_client(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            app = Mock()
            app.get_accounts.return_value = []
            app.acquire_token_interactive.return_value = {"access_token": "fresh"}

            with patch("odgate.auth.oauth_client.msal.PublicClientApplication", return_value=app):
                token = OAuthClient(_info(tmp)).get_access_token(SCOPES)

            self.assertEqual(token, "fresh")

    def test_confidential_client_uses_client_credentials(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            app = Mock()
            app.acquire_token_for_client.return_value = {"access_token": "app-token"}

            with patch(
                "odgate.auth.oauth_client.msal.ConfidentialClientApplication",
                return_value=app,
            ) as factory:
                token = OAuthClient(_info(tmp, client_secret="s3cret")).get_access_token(SCOPES)

            self.assertEqual(token, "app-token")
            self.assertEqual(factory.call_args.kwargs["client_credential"], "s3cret")

    def test_missing_token_raises_auth_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            app = Mock()
            app.get_accounts.return_value = []

            with patch("odgate.auth.oauth_client.msal.PublicClientApplication", return_value=app):
                with self.assertRaises(AuthError):
                    OAuthClient(_info(tmp)).get_access_token(SCOPES, interactive=False)

    def test_msal_exception_is_wrapped(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            app = Mock()
            app.get_accounts.side_effect = RuntimeError("boom")

            with patch("odgate.auth.oauth_client.msal.PublicClientApplication", return_value=app):
                with self.assertRaises(AuthError) as ctx:
                    OAuthClient(_info(tmp)).get_access_token(SCOPES)

            self.assertIsInstance(ctx.exception.cause, RuntimeError)

    def test_corrupt_cache_file_raises_auth_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            info = _info(tmp)
            cache_file = Path(info.token_cache_file)
            cache_file.parent.mkdir(parents=True)
            cache_file.write_text("{not json", encoding="utf-8")

            with patch("odgate.auth.oauth_client.msal.PublicClientApplication"):
                with self.assertRaises(AuthError):
                    OAuthClient(info).get_access_token(SCOPES)

    def test_changed_cache_is_saved(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            info = _info(tmp)
            app = Mock()
            app.get_accounts.return_value = [{"username": "me"}]
            app.acquire_token_silent.return_value = {"access_token": "tok"}

            with patch("odgate.auth.oauth_client.msal.PublicClientApplication", return_value=app):
                client = OAuthClient(info)
                client._cache = Mock(has_state_changed=True)
                client._cache.serialize.return_value = '{"AccessToken": {}}'
                client.get_access_token(SCOPES)

            saved = Path(info.token_cache_file).read_text(encoding="utf-8")
            self.assertEqual(saved, '{"AccessToken": {}}')

    def test_rejects_empty_scopes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ValueError):
                OAuthClient(_info(tmp)).get_access_token([])

    def test_session_sends_bearer_token(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            client = OAuthClient(_info(tmp))
            with patch.object(client, "get_access_token", return_value="tok") as get_token:
                session = client.build_session(SCOPES)
                prepared = requests.Request("GET", "https://graph.microsoft.com/v1.0/me").prepare()
                session.auth(prepared)

            self.assertEqual(prepared.headers["Authorization"], "Bearer tok")
            get_token.assert_called_once_with(SCOPES, interactive=False)


if __name__ == "__main__":
    unittest.main()
