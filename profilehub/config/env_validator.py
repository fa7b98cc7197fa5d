# profilehub/config/env_validator.py
# Environment variable registry for optimization provider credentials

import os
from typing import Optional


# * Required environment variables by provider ID
REQUIRED_ENV_VARS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
}


def get_required_env_var(provider: str) -> Optional[str]:
    return REQUIRED_ENV_VARS.get(provider)


def validate_provider_env(provider: str) -> bool:
    """Check if the provider's credential is present.

    Providers without a registered variable need no key.
    """
    var_name = REQUIRED_ENV_VARS.get(provider)
    if var_name is None:
        return True
    return bool(os.getenv(var_name))


def get_missing_env_message(provider: str) -> str:
    var_name = REQUIRED_ENV_VARS.get(provider)
    if var_name is None:
        return f"Provider '{provider}' does not require an API key."
    return f"Missing {var_name} in environment or .env"
