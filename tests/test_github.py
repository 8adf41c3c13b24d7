import json
from unittest import IsolatedAsyncioTestCase
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp

from promote_release.exceptions import DecodeError, ManifestShapeError, NetworkError
from promote_release.github import GitHubClient


def fake_session(body: str = "{}"):
    response = MagicMock()
    response.text = AsyncMock(return_value=body)

    request = MagicMock()
    request.__aenter__ = AsyncMock(return_value=response)
    request.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.get.return_value = request

    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=session)
    session_cm.__aexit__ = AsyncMock(return_value=False)
    return session_cm, session, response


class TestGitHubClient(IsolatedAsyncioTestCase):
    def test_headers(self):
        headers = GitHubClient().headers
        self.assertEqual(headers["User-Agent"], "rust-lang/promote-release")
        self.assertNotIn("Authorization", headers)

        headers = GitHubClient(token="ghp_fake").headers
        self.assertEqual(headers["Authorization"], "token ghp_fake")

    @patch("promote_release.github.aiohttp.ClientSession")
    async def test_get_json(self, client_session: MagicMock):
        session_cm, session, _ = fake_session(json.dumps({"sha": "abc"}))
        client_session.return_value = session_cm

        client = GitHubClient(api_url="https://api.example.com/")
        actual = await client.get_json("/repos/rust-lang/rustup/commits/stable", required={"sha": str})

        self.assertEqual(actual, {"sha": "abc"})
        session.get.assert_called_once_with("https://api.example.com/repos/rust-lang/rustup/commits/stable")
        self.assertEqual(client_session.call_args.kwargs["headers"]["User-Agent"], "rust-lang/promote-release")

    @patch("promote_release.github.aiohttp.ClientSession")
    async def test_get_json_transport_failure(self, client_session: MagicMock):
        session_cm, session, _ = fake_session()
        session.get.side_effect = aiohttp.ClientConnectionError("connection reset")
        client_session.return_value = session_cm

        with self.assertRaisesRegex(NetworkError, "connection reset"):
            await GitHubClient().get_json("/repos/rust-lang/rustup/commits/stable")

    @patch("promote_release.github.aiohttp.ClientSession")
    async def test_get_json_http_error(self, client_session: MagicMock):
        session_cm, _, response = fake_session()
        response.raise_for_status.side_effect = aiohttp.ClientResponseError(
            request_info=MagicMock(), history=(), status=404, message="Not Found"
        )
        client_session.return_value = session_cm

        with self.assertRaises(NetworkError):
            await GitHubClient().get_json("/repos/rust-lang/rustup/commits/stable")

    @patch("promote_release.github.aiohttp.ClientSession")
    async def test_get_json_invalid_json(self, client_session: MagicMock):
        client_session.return_value = fake_session("<html>rate limited</html>")[0]

        with self.assertRaises(DecodeError) as cm:
            await GitHubClient().get_json("/repos/rust-lang/rustup/commits/stable")
        self.assertEqual(cm.exception.step, "json")

    @patch("promote_release.github.aiohttp.ClientSession")
    async def test_get_json_shape(self, client_session: MagicMock):
        client_session.return_value = fake_session("[]")[0]
        with self.assertRaises(ManifestShapeError):
            await GitHubClient().get_json("/repos/rust-lang/rustup/commits/stable")

        client_session.return_value = fake_session(json.dumps({"url": "x"}))[0]
        with self.assertRaises(ManifestShapeError) as cm:
            await GitHubClient().get_json("/repos/rust-lang/rustup/commits/stable", required={"sha": str})
        self.assertEqual(cm.exception.field, "sha")

    @patch("promote_release.github.aiohttp.ClientSession")
    async def test_get_json_wrong_field_type(self, client_session: MagicMock):
        for body in ({"sha": None}, {"sha": 42}, {"sha": ["abc"]}):
            client_session.return_value = fake_session(json.dumps(body))[0]
            with self.assertRaises(ManifestShapeError) as cm:
                await GitHubClient().get_head_sha("stable")
            self.assertEqual(cm.exception.field, "sha")

        for body in ({"content": None}, {"content": 123}):
            client_session.return_value = fake_session(json.dumps(body))[0]
            with self.assertRaises(ManifestShapeError) as cm:
                await GitHubClient().get_file_content("Cargo.toml", ref="abc")
            self.assertEqual(cm.exception.field, "content")

    async def test_get_head_sha(self):
        client = GitHubClient()
        with patch.object(client, "get_json", AsyncMock(return_value={"sha": "abc"})) as get_json:
            self.assertEqual(await client.get_head_sha("beta"), "abc")
        get_json.assert_awaited_once_with("/repos/rust-lang/rustup/commits/beta", required={"sha": str})

    async def test_get_file_content(self):
        client = GitHubClient(repository="octo/repo")
        with patch.object(client, "get_json", AsyncMock(return_value={"content": "Zm9v\n"})) as get_json:
            self.assertEqual(await client.get_file_content("Cargo.toml", ref="abc"), "Zm9v\n")
        get_json.assert_awaited_once_with("/repos/octo/repo/contents/Cargo.toml?ref=abc", required={"content": str})
