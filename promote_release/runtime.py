import logging
from pathlib import Path
from typing import Any, Dict, Optional

import tomli

from promote_release.config import PromoteConfig
from promote_release.exceptions import ConfigError


class Runtime:
    def __init__(self, config: Dict[str, Any], dry_run: bool):
        self.config = config
        self.dry_run = dry_run
        self.logger = self.init_logger()

    @staticmethod
    def init_logger():
        root = logging.getLogger()
        if root.handlers:
            root.removeHandler(root.handlers[0])
        logger = logging.getLogger('promote_release')
        formatter = logging.Formatter('%(asctime)s %(name)s:%(levelname)s %(message)s')
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        return logger

    @classmethod
    def from_config_file(cls, config_filename: Optional[Path], dry_run: bool):
        """Load the TOML config file; without one, every option has to come from the environment"""
        config_dict: Dict[str, Any] = {}
        if config_filename is not None:
            with open(config_filename, "rb") as config_file:
                try:
                    config_dict = tomli.load(config_file)
                except tomli.TOMLDecodeError as e:
                    raise ConfigError(f"Invalid config file {config_filename}: {e}") from e
        return Runtime(config=config_dict, dry_run=dry_run)

    def promote_config(self) -> PromoteConfig:
        return PromoteConfig.load(self.config)
