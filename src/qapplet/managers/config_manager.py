"""
Config Manager

Reads the root config the host passes on the command line.

    applet.py '{"extensionId": "...", "geometry": {...}, ...}'
    applet.py DEV
    applet.py TEST '{"applet": {"user": {"city": "Austin"}}}'

DEV/TEST (any case) load the packaged dev_defaults.yaml, optionally
deep-merged with a JSON override in the next argument.
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import yaml

from qapplet.errors import ConfigurationError
from qapplet.models.config import deep_merge
from qapplet.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.CONFIG)

DEV_MODE_ARGS = ("DEV", "TEST")
DEV_DEFAULTS_PATH = Path(__file__).resolve().parent.parent / "config" / "dev_defaults.yaml"


class ConfigManager:
    """
    Root config loader

    Example:
        manager = ConfigManager()
        root = manager.read_root_config(sys.argv)
    """

    def __init__(self, dev_defaults_path: Path = DEV_DEFAULTS_PATH):
        self.dev_defaults_path = Path(dev_defaults_path)

    def load_dev_defaults(self) -> Dict[str, Any]:
        with open(self.dev_defaults_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        log.info(f"Loaded dev defaults from {self.dev_defaults_path.name}", keys=str(list(data.keys())))
        return data

    @staticmethod
    def parse_json(raw: str) -> Dict[str, Any]:
        try:
            config = json.loads(raw)
        except ValueError as ex:
            log.error("Could not parse config as JSON", raw=raw[:200], error=str(ex))
            raise ConfigurationError(f"Could not parse config as JSON: {ex}") from ex

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigurationError(f"Config must be a JSON object, got {type(config).__name__}")
        return config

    def read_root_config(self, argv: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        """
        Root config from process arguments (argv[0] is the program name).

        Raises:
            ConfigurationError: argument is not a JSON object
        """
        args = list(sys.argv if argv is None else argv)[1:]
        if not args:
            log.debug("No config argument, using empty root config")
            return {}

        first = args[0]
        if first.strip().upper() in DEV_MODE_ARGS:
            log.info(f"Running in {first.strip().upper()} mode")
            config = self.load_dev_defaults()
            if len(args) > 1:
                config = deep_merge(config, self.parse_json(args[1]))
            return config

        config = self.parse_json(first)
        log.debug("Configuration", extensionId=config.get("extensionId"))
        return config
