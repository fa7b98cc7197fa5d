# tests/unit/config/test_env_validator.py
# Unit tests for environment variable validation

import os
from unittest.mock import patch

from profilehub.config.env_validator import (
    REQUIRED_ENV_VARS,
    get_missing_env_message,
    get_required_env_var,
    validate_provider_env,
)


class TestRequiredEnvVars:

    # * Verify openai requires api key
    def test_openai_requires_api_key(self):
        assert REQUIRED_ENV_VARS["openai"] == "OPENAI_API_KEY"
        assert get_required_env_var("openai") == "OPENAI_API_KEY"

    def test_unknown_provider_has_no_requirement(self):
        assert get_required_env_var("unknown") is None
        assert validate_provider_env("unknown") is True


class TestValidateProviderEnv:

    @patch.dict(os.environ, {"OPENAI_API_KEY": "sk-test"})
    # * Verify present key validates
    def test_present_key(self):
        assert validate_provider_env("openai") is True

    @patch.dict(os.environ, {"OPENAI_API_KEY": ""})
    def test_empty_key_is_missing(self):
        assert validate_provider_env("openai") is False

    def test_missing_message(self):
        assert get_missing_env_message("openai") == "Missing OPENAI_API_KEY in environment or .env"
