import asyncio
import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import aiohttp

from promote_release import constants
from promote_release.exceptions import DecodeError, ManifestShapeError, NetworkError

logger = logging.getLogger(__name__)


class GitHubClient:
    """
    Minimal read-only client for the GitHub REST API.
    Requests are anonymous unless a token is given. Nothing is cached or retried.
    """

    def __init__(self, repository: str = constants.RUSTUP_REPOSITORY, api_url: str = constants.GITHUB_API_URL,
                 token: Optional[str] = None):
        self.repository = repository
        self.api_url = api_url.rstrip("/")
        self.token = token

    @property
    def headers(self) -> Dict[str, str]:
        headers = {
            "User-Agent": constants.USER_AGENT,
            "Accept": "application/vnd.github+json",
        }
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    async def get_json(self, path: str, required: Optional[Dict[str, type]] = None) -> Dict[str, Any]:
        """
        GET an API path and decode the body as a JSON object.
        :param path: path relative to the API root, e.g. /repos/rust-lang/rustup/commits/stable
        :param required: keys the object must contain, mapped to the type their value must have
        :raises NetworkError: on transport failure or a non-2xx status
        :raises DecodeError: if the body is not JSON
        :raises ManifestShapeError: if the body is not an object, or a required key is missing or has the wrong type
        """
        url = f"{self.api_url}{path}"
        logger.debug("GET %s", url)
        try:
            async with aiohttp.ClientSession(headers=self.headers) as session:
                async with session.get(url) as response:
                    response.raise_for_status()
                    body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(f"Failed to fetch {url}: {e}") from e

        try:
            data = json.loads(body)
        except ValueError as e:
            raise DecodeError("json", f"response from {url} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ManifestShapeError("<root>", f"Expected a JSON object from {url}, got {type(data).__name__}")
        for key, expected_type in (required or {}).items():
            if key not in data:
                raise ManifestShapeError(key, f"Response from {url} lacks the '{key}' field")
            if not isinstance(data[key], expected_type):
                raise ManifestShapeError(
                    key, f"Field '{key}' from {url} should be a {expected_type.__name__}, got {data[key]!r}"
                )
        return data

    async def get_head_sha(self, branch: str) -> str:
        commit = await self.get_json(f"/repos/{self.repository}/commits/{quote(branch)}", required={"sha": str})
        return commit["sha"]

    async def get_file_content(self, path: str, ref: str) -> str:
        """Return the raw, still base64-encoded `content` field of a file at the given ref"""
        blob = await self.get_json(
            f"/repos/{self.repository}/contents/{path}?ref={quote(ref)}", required={"content": str}
        )
        return blob["content"]
