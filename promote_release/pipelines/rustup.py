"""
Pipeline to promote a rustup release.

Whenever a commit lands on the `stable` or `beta` branch of rust-lang/rustup, CI builds the
installer artifacts and copies them into s3://{download_bucket}/{download_dir}/{commit-sha}/.

This pipeline:
1. Refuses channels other than stable and beta
2. Picks the commit to release: the configured override, or the head of the channel's branch
3. Reads the version from Cargo.toml at that commit
4. Downloads the artifacts built for that commit into {scratch_dir}/dist
5. Archives them to s3://{upload_bucket}/{upload_dir}/archive/{version}/
6. For stable only, copies them to s3://{upload_bucket}/{upload_dir}/dist/, where installers look for them
7. Uploads release-stable.toml pointing at the new version

The manifest is always written last, so a client that sees the new version can rely on the
artifacts being in place. Nothing is cleaned up on failure; re-running the pipeline overwrites
whatever a previous attempt left behind.
"""

import base64
import binascii
import shutil
from pathlib import Path
from typing import Optional

import tomli

from promote_release import constants
from promote_release.config import Channel, PromoteConfig
from promote_release.exceptions import ConfigError, DecodeError, ManifestShapeError
from promote_release.github import GitHubClient
from promote_release.runtime import Runtime
from promote_release.s3 import S3Client, local_dir

SUPPORTED_CHANNELS = (Channel.STABLE, Channel.BETA)


def render_release_manifest(version: str) -> str:
    # Installers parse this literally: keep the single quotes and surrounding newlines
    return f"""
schema-version = '{constants.RELEASE_MANIFEST_SCHEMA_VERSION}'
version = '{version}'
"""


def parse_cargo_version(encoded_content: str) -> str:
    """
    Extract package.version from the base64 `content` of a Cargo.toml returned by the contents API.
    GitHub wraps the base64 body across lines; the newlines are stripped before decoding.
    """
    try:
        raw = base64.b64decode(encoded_content.replace("\n", ""), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError("base64", str(e)) from e

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError("utf-8", str(e)) from e

    try:
        cargo_toml = tomli.loads(text)
    except tomli.TOMLDecodeError as e:
        raise DecodeError("toml", str(e)) from e

    package = cargo_toml.get("package")
    if not isinstance(package, dict) or "version" not in package:
        raise ManifestShapeError("package.version", "Cargo.toml has no package.version")
    version = package["version"]
    if not isinstance(version, str):
        # e.g. `version.workspace = true`
        raise ManifestShapeError("package.version", f"package.version is not a string: {version!r}")
    return version


class PromoteRustupPipeline:
    def __init__(
        self,
        runtime: Runtime,
        config: PromoteConfig,
        s3: Optional[S3Client] = None,
        github: Optional[GitHubClient] = None,
    ):
        self.runtime = runtime
        self.config = config
        self.logger = runtime.logger
        self.s3 = s3 or S3Client(endpoint_url=config.s3_endpoint_url, dry_run=runtime.dry_run)
        self.github = github or GitHubClient(
            repository=config.github_repository,
            api_url=config.github_api_url,
            token=config.github_token,
        )

    @property
    def upload_url(self) -> str:
        return f"s3://{self.config.upload_bucket}/{self.config.upload_dir}"

    async def run(self):
        # rustup only has beta and stable releases
        self.enforce_channel()

        sha = await self.get_commit_sha()
        version = await self.get_next_version(sha)
        dist_dir = await self.download_artifacts(sha)

        await self.archive_artifacts(dist_dir, version)
        if self.config.channel == Channel.STABLE:
            await self.promote_artifacts(dist_dir)

        await self.update_release(version)
        self.logger.info("rustup %s promoted on the %s channel from commit %s", version, self.config.channel, sha)

    def enforce_channel(self):
        self.logger.info("Checking channel...")
        if self.config.channel not in SUPPORTED_CHANNELS:
            raise ConfigError(
                f"promoting rustup is only supported for the stable and beta channels, not {self.config.channel}"
            )

    async def get_commit_sha(self) -> str:
        if self.config.override_commit is not None:
            self.logger.info("Using override commit %s", self.config.override_commit)
            return self.config.override_commit
        sha = await self.github.get_head_sha(str(self.config.channel))
        self.logger.info("Head of the %s branch is %s", self.config.channel, sha)
        return sha

    async def get_next_version(self, sha: str) -> str:
        self.logger.info("Getting next rustup version from Cargo.toml...")
        content = await self.github.get_file_content("Cargo.toml", ref=sha)
        version = parse_cargo_version(content)
        self.logger.info("Next rustup version is %s", version)
        return version

    async def download_artifacts(self, sha: str) -> Path:
        self.logger.info("Downloading artifacts from %s...", self.config.download_bucket)
        dist_dir = self.config.scratch_dir / "dist"
        # Residue from an earlier run must not end up in this upload
        try:
            shutil.rmtree(dist_dir)
        except FileNotFoundError:
            pass
        dist_dir.mkdir(parents=True)

        source = f"s3://{self.config.download_bucket}/{self.config.download_dir}/{sha}/"
        await self.s3.copy(source, local_dir(dist_dir), recursive=True)
        return dist_dir

    async def archive_artifacts(self, dist_dir: Path, version: str):
        self.logger.info("Archiving artifacts for version %s...", version)
        await self.s3.copy(local_dir(dist_dir), f"{self.upload_url}/archive/{version}/", recursive=True)

    async def promote_artifacts(self, dist_dir: Path):
        self.logger.info("Promoting artifacts to dist/...")
        await self.s3.copy(local_dir(dist_dir), f"{self.upload_url}/dist/", recursive=True)

    async def update_release(self, version: str):
        self.logger.info("Updating version and manifest...")
        manifest_path = self.config.scratch_dir / constants.RELEASE_MANIFEST_NAME
        manifest_path.write_text(render_release_manifest(version), encoding="utf-8")
        await self.s3.copy(manifest_path, f"{self.upload_url}/{constants.RELEASE_MANIFEST_NAME}")
