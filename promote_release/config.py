import os
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from promote_release import constants
from promote_release.exceptions import ConfigError


class Channel(str, Enum):
    STABLE = "stable"
    BETA = "beta"
    NIGHTLY = "nightly"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> "Channel":
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ConfigError(f"Unknown channel '{value}'; expected one of {', '.join(c.value for c in cls)}") from None


@dataclass(frozen=True)
class PromoteConfig:
    """Options of a single promotion. Built once per invocation and never mutated."""

    channel: Channel
    download_bucket: str
    download_dir: str
    upload_bucket: str
    upload_dir: str
    scratch_dir: Path
    override_commit: Optional[str] = None
    s3_endpoint_url: Optional[str] = None
    github_api_url: str = constants.GITHUB_API_URL
    github_repository: str = constants.RUSTUP_REPOSITORY
    github_token: Optional[str] = None

    REQUIRED = ("channel", "download_bucket", "download_dir", "upload_bucket", "upload_dir", "scratch_dir")

    @classmethod
    def load(cls, config: Dict[str, Any], environ: Optional[Mapping[str, str]] = None) -> "PromoteConfig":
        """
        Build the configuration from the [promote-release] table of the config file,
        letting PROMOTE_RELEASE_<KEY> environment variables override it.
        """
        if environ is None:
            environ = os.environ
        section = config.get(constants.CONFIG_SECTION, {})
        if not isinstance(section, dict):
            raise ConfigError(f"[{constants.CONFIG_SECTION}] must be a table, got {section!r}")

        values = {}
        for field in fields(cls):
            value = environ.get(f"{constants.ENV_PREFIX}{field.name.upper()}")
            if value in (None, ""):
                value = section.get(field.name)
                if value is not None and not isinstance(value, str):
                    raise ConfigError(f"{field.name} in [{constants.CONFIG_SECTION}] must be a string, got {value!r}")
            if isinstance(value, str):
                value = value.strip()
            # empty strings mean "unset"
            if value not in (None, ""):
                values[field.name] = value

        if "github_token" not in values and environ.get("GITHUB_TOKEN"):
            values["github_token"] = environ["GITHUB_TOKEN"]

        missing = [key for key in cls.REQUIRED if key not in values]
        if missing:
            raise ConfigError(
                f"Missing configuration: {', '.join(missing)} (set them in [{constants.CONFIG_SECTION}] "
                f"or as {constants.ENV_PREFIX}<KEY> environment variables)"
            )

        values["channel"] = Channel.parse(str(values["channel"]))
        values["scratch_dir"] = Path(values["scratch_dir"]).expanduser()
        return cls(**values)
