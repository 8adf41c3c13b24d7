from typing import List, Optional


class PromoteReleaseError(Exception):
    """Base class for every failure that aborts a promotion"""

    pass


class ConfigError(PromoteReleaseError):
    pass


class NetworkError(PromoteReleaseError):
    """Transport failure or unexpected HTTP status talking to the GitHub API"""

    pass


class DecodeError(PromoteReleaseError):
    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"Failed to decode {step}: {message}")
        self.step = step


class ManifestShapeError(PromoteReleaseError):
    def __init__(self, field: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Expected field '{field}' is missing")
        self.field = field


class SubprocessError(PromoteReleaseError, ChildProcessError):
    def __init__(self, cmd: List[str], returncode: int, stderr: str = "") -> None:
        super().__init__(f"Process {cmd!r} exited with code {returncode}.\nstderr>>{stderr}<<\n")
        self.cmd = cmd
        self.returncode = returncode
        self.stderr = stderr
