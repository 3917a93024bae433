import os
import logging

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILE = ".libc_locator.yaml"
CONFIG_ENV = "LIBC_LOCATOR_CONFIG"
MAX_WALK_STEPS = 30


class ConfigError(Exception):
    pass


def find_config_file(start=None):
    """Walks up from `start` (default: cwd) looking for CONFIG_FILE."""
    if os.environ.get(CONFIG_ENV):
        return os.path.abspath(os.environ[CONFIG_ENV])

    current = os.path.abspath(start or os.getcwd())
    steps = 0
    while True:
        if steps > MAX_WALK_STEPS:
            logger.debug("Reached directory walk limit (%d) at %s", MAX_WALK_STEPS, current)
            break
        steps += 1

        candidate = os.path.join(current, CONFIG_FILE)
        if os.path.exists(candidate):
            return candidate

        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return None


def load_config(path=None):
    """
    Loads the YAML configuration. Returns an empty dict when no file exists.

    Recognised keys: cc, platform {os, abi, arch}, windows_sdk {path10,
    version10, path81, version81, msvc_lib_dir}, max_output_bytes, log_level.
    """
    path = path or find_config_file()
    if not path:
        return {}
    if not os.path.exists(path):
        raise ConfigError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at top level")

    for key in ("platform", "windows_sdk"):
        if key in data and not isinstance(data[key], dict):
            raise ConfigError(f"{path}: '{key}' must be a mapping")

    logger.debug("Loaded config from %s", path)
    return data


def resolve_cc(profile, explicit=None, env=None, config=None):
    """Compiler selection: explicit argument, then $CC, then config `cc`, then the platform default."""
    if explicit:
        return explicit
    env = os.environ if env is None else env
    if env.get("CC"):
        return env["CC"]
    if config and config.get("cc"):
        return config["cc"]
    return profile.default_cc
