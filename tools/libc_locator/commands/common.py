import logging
import sys

from ..core.config import ConfigError, load_config
from ..core.platform import host_profile


def load_context(args):
    """Returns (config, profile) for a command, exiting with a message on a bad config."""
    try:
        config = load_config(getattr(args, "config", None))
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    level = "DEBUG" if getattr(args, "verbose", False) else config.get("log_level", "WARNING")
    logging.basicConfig(level=str(level).upper(), format="%(levelname)s %(name)s: %(message)s")

    return config, host_profile(config.get("platform"))
