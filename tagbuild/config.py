#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

from .exit_codes import ConfigError

logger = logging.getLogger("tagbuild")

CONFIG_FILENAMES = ['config.yaml', 'config.yml', 'config.toml', 'config.json']
LOCAL_CONFIG_FILENAMES = ['.tagbuild.yaml', '.tagbuild.yml', '.tagbuild.toml', '.tagbuild.json']


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. TAGBUILD_CONFIG environment variable
    2. .tagbuild.* in the current working directory (per-project)
    3. ~/.tagbuild/ directory (per-user)

    Returns None if no configuration file exists.
    """
    if 'TAGBUILD_CONFIG' in os.environ:
        path = Path(os.environ['TAGBUILD_CONFIG'])
        if not path.exists():
            raise ConfigError(f"TAGBUILD_CONFIG points to a missing file: {path}")
        return path

    for filename in LOCAL_CONFIG_FILENAMES:
        path = Path.cwd() / filename
        if path.exists():
            return path

    tagbuild_dir = Path.home() / '.tagbuild'
    for filename in CONFIG_FILENAMES:
        path = tagbuild_dir / filename
        if path.exists():
            return path

    return None


def read_config_file(config_path: Path) -> dict:
    """Read one configuration file, choosing the parser by suffix."""
    try:
        if config_path.suffix.lower() == '.toml':
            with open(config_path, 'rb') as f:
                file_config = tomllib.load(f)
        elif config_path.suffix.lower() in ['.yaml', '.yml']:
            with open(config_path, 'r') as f:
                file_config = yaml.safe_load(f)
        else:
            with open(config_path, 'r') as f:
                file_config = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Error loading config from {config_path}: {e}") from e

    if file_config is None:
        return {}
    if not isinstance(file_config, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return file_config


def load_config():
    """Load configuration from file, defaults and environment."""
    config = get_default_config()

    config_path = get_config_path()
    if config_path is not None:
        logger.debug(f"Loading config from {config_path}")
        config = merge_configs(config, read_config_file(config_path))

    return apply_env_overrides(config)


def get_default_config():
    """Get default configuration."""
    return {
        "archive": {
            "format": "tar.gz",
            "prefix": "{name}-{version}",
            "strict_listing": True
        },
        "package": {
            "name": "",
            "release": "1",
            "arch": "amd64",
            "format": "deb"
        },
        "git": {
            "timeout": 60
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s"
        }
    }


def configure_logging(config, verbose: bool = False):
    """Configure the root logger from the `logging` config section."""
    section = config.get("logging", {})
    level = "DEBUG" if verbose else str(section.get("level", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format=section.get("format", "%(levelname)s: %(message)s"),
        handlers=[
            logging.StreamHandler(sys.stderr)  # Default to stderr
        ],
        force=True
    )


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: TAGBUILD_SECTION_KEY
    For example: TAGBUILD_ARCHIVE_STRICT_LISTING=false
    """
    env_prefix = "TAGBUILD_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == "TAGBUILD_CONFIG":
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Longest config key that is a prefix of the remaining parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i:i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if matched_key is None:
                break

            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            if not isinstance(current_level[matched_key], dict):
                break
            current_level = current_level[matched_key]
            i += best_match_len

    return config
