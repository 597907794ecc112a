# coordscout/configuration.py

"""
Configuration loader for CoordScout.

Settings come from an optional YAML file merged over DEFAULT_CONFIG.
Unlike a desktop app, the core never writes the file: a missing file
simply means defaults.
"""

import copy
import logging
import os
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError
from .network.candidates import validate_prefix

# This dictionary holds the default structure and values for our config.
DEFAULT_CONFIG: Dict[str, Any] = {
    'port': 8080,
    'probe_timeout_seconds': 1.5,
    'request_timeout_seconds': 3,
    'lookup_timeout_seconds': 3,
    'poll_interval_ms': 500,
    'max_candidates': 30,
    # Common gateway/static assignments, probed before the ascending fill
    'priority_octets': [1, 100, 101, 102, 103, 104, 105, 110, 150, 200],
    'default_subnets': ['192.168.1', '192.168.0', '10.0.0', '172.16.0'],
    'ip_lookup_url': 'https://api.ipify.org',
    'use_local_interfaces': False,
    'log_level': 'INFO',
}

ENV_CONFIG_PATH = "COORDSCOUT_CONFIG"


def get_config_path() -> str:
    """Returns the path to the config file."""
    return os.environ.get(ENV_CONFIG_PATH, "coordscout.yaml")


def validate_config(config: Dict[str, Any]) -> None:
    """Raises ConfigError if a setting is outside its usable range."""
    for key in ('probe_timeout_seconds', 'request_timeout_seconds',
                'lookup_timeout_seconds', 'poll_interval_ms'):
        value = config.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigError(f"'{key}' must be a positive number, got {value!r}")

    port = config.get('port')
    if isinstance(port, bool) or not isinstance(port, int) or not (1 <= port <= 65535):
        raise ConfigError(f"'port' must be an integer in 1-65535, got {port!r}")

    limit = config.get('max_candidates')
    if isinstance(limit, bool) or not isinstance(limit, int) or not (1 <= limit <= 254):
        raise ConfigError(f"'max_candidates' must be an integer in 1-254, got {limit!r}")

    subnets = config.get('default_subnets')
    if not isinstance(subnets, list) or not subnets:
        raise ConfigError("'default_subnets' must be a non-empty list")
    for subnet in subnets:
        try:
            validate_prefix(subnet)
        except ValueError as e:
            raise ConfigError(f"'default_subnets': {e}") from e

    octets = config.get('priority_octets')
    if not isinstance(octets, list) or any(isinstance(o, bool) or not isinstance(o, int) for o in octets):
        raise ConfigError(f"'priority_octets' must be a list of integers, got {octets!r}")

    level = config.get('log_level')
    if not isinstance(level, str) or not isinstance(logging.getLevelName(level.upper()), int):
        raise ConfigError(f"'log_level' must be a logging level name such as 'INFO', got {level!r}")


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads configuration from a YAML file.

    If the file doesn't exist, the defaults are returned.
    If the file is invalid, ConfigError is raised.
    """
    config_path = path or get_config_path()
    config = copy.deepcopy(DEFAULT_CONFIG)
    try:
        with open(config_path, 'r') as f:
            user_config = yaml.safe_load(f)
    except FileNotFoundError:
        logging.debug(f"No configuration file at '{config_path}', using defaults.")
        return config
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing '{config_path}': {e}") from e

    if user_config is None:
        return config
    if not isinstance(user_config, dict):
        raise ConfigError(f"'{config_path}' must contain a mapping of settings")

    config.update(user_config)
    validate_config(config)
    return config
