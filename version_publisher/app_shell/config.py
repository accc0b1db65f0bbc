import logging
import os
from collections.abc import Mapping

from version_publisher.core.errors import ConfigError
from version_publisher.rules.models import Rules

logger = logging.getLogger(__name__)


def validate_ops_rules(rules: Rules, environ: Mapping[str, str] | None = None) -> None:
    """
    Validate operational requirements before startup.

    Raises:
        ConfigError: if any env var listed in ops.required_env is unset.
    """
    env = os.environ if environ is None else environ

    missing = [name for name in rules.ops.required_env if name not in env]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    logger.info("Configuration validated")
