import logging
from pathlib import Path
from typing import List, Optional, Union

from promote_release import exectools

logger = logging.getLogger(__name__)


def local_dir(path: Union[str, Path]) -> str:
    """Render a local directory with the trailing separator aws s3 cp expects"""
    return f"{str(path).rstrip('/')}/"


class S3Client:
    """
    Object-store driver around the `aws s3` CLI.
    Credentials and retry behaviour are whatever the CLI picks up from the process environment.
    """

    def __init__(self, endpoint_url: Optional[str] = None, dry_run: bool = False):
        self.endpoint_url = endpoint_url
        self.dry_run = dry_run

    def _cp_command(self, source: str, destination: str, recursive: bool) -> List[str]:
        cmd = ["aws", "s3"]
        if self.endpoint_url:
            cmd.extend(["--endpoint-url", self.endpoint_url])
        cmd.append("cp")
        if recursive:
            cmd.append("--recursive")
        cmd.append("--only-show-errors")
        if self.dry_run:
            cmd.append("--dryrun")
        return cmd + [source, destination]

    async def copy(self, source: Union[str, Path], destination: Union[str, Path], recursive: bool = False):
        """
        Copy between a local path and an s3:// URL (either direction).
        :param source: local path or s3:// URL; a trailing slash denotes a directory
        :param destination: local path or s3:// URL; a trailing slash denotes a directory
        :param recursive: copy every object under source
        :raises SubprocessError: if aws exits with a non-zero code
        """
        cmd = self._cp_command(str(source), str(destination), recursive)
        if self.dry_run:
            logger.warning("[DRY RUN] aws will only report what %s would copy", source)
        await exectools.cmd_assert_async(cmd)
