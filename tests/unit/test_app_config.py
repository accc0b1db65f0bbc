import pytest

from version_publisher.app_shell.config import validate_ops_rules
from version_publisher.core.errors import ConfigError
from version_publisher.rules.models import Rules


def test_no_required_env_passes():
    validate_ops_rules(Rules(), environ={})


def test_present_env_passes():
    rules = Rules.model_validate({"ops": {"required_env": ["SMTP_HOST"]}})
    validate_ops_rules(rules, environ={"SMTP_HOST": "mail"})


def test_missing_env_fails_fast():
    rules = Rules.model_validate({"ops": {"required_env": ["SMTP_HOST", "SMTP_USER"]}})

    with pytest.raises(ConfigError, match="SMTP_HOST, SMTP_USER"):
        validate_ops_rules(rules, environ={})
