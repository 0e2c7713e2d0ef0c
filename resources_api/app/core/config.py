"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts without any configuration against a local data
directory.  In a deployment, override them via environment variables.
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Resources API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = _env_flag("DEBUG", "false")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Requests without a bearer token are attributed to
    # ``default_principal`` when anonymous access is allowed; otherwise
    # they are rejected with 401.
    allow_anonymous: bool = _env_flag("ALLOW_ANONYMOUS", "true")
    default_principal: str = os.getenv("DEFAULT_PRINCIPAL", "DUMMY_USER")

    # Directory holding ``<data_prefix>/seed.json`` and
    # ``<data_prefix>/data.json``.  Relative paths are resolved against
    # the project root by ``store.get_data_dir``.
    data_dir: str = os.getenv("DATA_DIR", "data")
    data_prefix: str = os.getenv("DATA_PREFIX", "resources")
    persistent: bool = _env_flag("PERSISTENT", "true")

    # Base URLs of the contacts and rates services.  Lookups issue
    # ``GET <url>/<id>``.
    contacts_url: str = os.getenv("CONTACTS_URL", "http://localhost:8080/api/contacts")
    rates_url: str = os.getenv("RATES_URL", "http://localhost:8080/api/rates")
    lookup_api_key: str = os.getenv("LOOKUP_API_KEY", "")
    lookup_timeout: float = float(os.getenv("LOOKUP_TIMEOUT", "15"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module.
settings = Settings()
