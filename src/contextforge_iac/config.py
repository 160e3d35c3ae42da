# ABOUTME: Configuration management for the ContextForge declarative client
# ABOUTME: Resolves endpoint and token from explicit values, environment, then defaults

"""
Configuration management using pydantic-settings.

=============================================================================
WHAT IS THIS FILE?
=============================================================================

This module holds the provider-level configuration. It:

1. READS environment variables (like CONTEXTFORGE_ENDPOINT, CONTEXTFORGE_TOKEN)
2. VALIDATES them (endpoint gets a scheme, booleans are booleans, etc.)
3. PRODUCES an immutable Connection value that the HTTP client is built from

=============================================================================
RESOLUTION ORDER
=============================================================================

The orchestration engine may pass values from the provider block. Those win.
Anything left unset falls back to the environment, and then to defaults:

    endpoint:  provider block -> CONTEXTFORGE_ENDPOINT -> http://localhost:4444
    token:     provider block -> CONTEXTFORGE_TOKEN    -> "" (unauthenticated)

pydantic-settings gives us exactly this order for free: keyword arguments
passed to the settings class take priority over environment variables, which
take priority over field defaults.

=============================================================================
ARCHITECTURE: TWO CONFIGURATION CLASSES
=============================================================================

1. Connection: How to reach ONE ContextForge gateway
   - endpoint, token, TLS and timeout settings
   - Frozen: built once and shared by every reconciler

2. ProviderSettings: Main configuration container
   - Everything in Connection, read from the environment
   - Log level and output format

=============================================================================
ENVIRONMENT VARIABLE MAPPING
=============================================================================

    CONTEXTFORGE_ENDPOINT   -> Gateway base URL
    CONTEXTFORGE_TOKEN      -> Bearer token for the admin API
    CONTEXTFORGE_INSECURE   -> Skip TLS certificate verification
    CONTEXTFORGE_TIMEOUT    -> HTTP transport timeout in seconds
    CONTEXTFORGE_LOG_LEVEL  -> DEBUG, INFO, WARNING, ERROR, CRITICAL
    CONTEXTFORGE_JSON_LOGS  -> Emit JSON log lines instead of console output
    CONTEXTFORGE_ENV_FILE   -> Optional .env file read by load_settings()
"""

from __future__ import annotations

import os
from typing import Annotated, Any

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Port 4444 is where a stock ContextForge gateway listens.
DEFAULT_ENDPOINT = "http://localhost:4444"


def _normalize_endpoint(v: str) -> str:
    """Add a scheme when missing and drop trailing slashes."""
    v = v.strip()
    if not v.startswith(("http://", "https://")):
        v = f"https://{v}"
    return v.rstrip("/")


# =============================================================================
# CONNECTION
# =============================================================================


class Connection(BaseModel):
    """
    Immutable description of how to reach a ContextForge gateway.

    WHY A SEPARATE, FROZEN CLASS?
    -----------------------------
    Every reconciler talks to the gateway through one shared client. The
    client only ever needs these four values, and none of them may change
    while reconciliations are in flight. Freezing the model means a
    Connection can be handed to any number of concurrent tasks safely.

    USAGE EXAMPLE:
    --------------
        connection = Connection(
            endpoint="https://gateway.example.com",
            token=SecretStr("my-api-token"),
        )
    """

    model_config = {"extra": "ignore", "frozen": True}

    endpoint: str = Field(default=DEFAULT_ENDPOINT, description="Gateway base URL")
    # Relative API paths like "/gateways" are joined onto this.

    token: SecretStr = Field(default=SecretStr(""), description="Bearer token")
    # Empty means unauthenticated. SecretStr keeps the value out of repr/logs;
    # call token.get_secret_value() to read it.

    insecure: bool = Field(default=False, description="Skip TLS verification")

    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """
        Ensure the endpoint has a scheme and no trailing slash.

        "gateway.example.com/" becomes "https://gateway.example.com", so that
        joining "/gateways" never produces a double slash.
        """
        return _normalize_endpoint(v)

    @property
    def authenticated(self) -> bool:
        """True when a bearer token is configured."""
        return bool(self.token.get_secret_value())


# =============================================================================
# PROVIDER SETTINGS
# =============================================================================


class ProviderSettings(BaseSettings):
    """
    Main provider configuration.

    USAGE:
    ------
        settings = load_settings()              # environment only
        settings = load_settings(token="abc")   # explicit value wins
        client = ContextForgeClient(settings.connection)
    """

    model_config = SettingsConfigDict(
        env_prefix="CONTEXTFORGE_",
        # Field "endpoint" reads CONTEXTFORGE_ENDPOINT, "token" reads
        # CONTEXTFORGE_TOKEN, and so on.
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # CONNECTION
    # -------------------------------------------------------------------------

    endpoint: str = Field(
        default=DEFAULT_ENDPOINT,
        description="ContextForge MCP Gateway endpoint URL",
    )

    token: SecretStr = Field(
        default=SecretStr(""),
        description="Bearer token for the gateway admin API",
    )
    # HOW TO GET A TOKEN:
    #   python -m mcpgateway.utils.create_jwt_token --username admin --exp 0
    # on the gateway host, or whatever the deployment uses for JWT issuance.

    insecure: bool = Field(
        default=False,
        description="Skip TLS verification",
    )
    # Only for gateways behind self-signed certificates in development.

    timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP transport timeout in seconds",
    )

    # -------------------------------------------------------------------------
    # LOGGING
    # -------------------------------------------------------------------------

    log_level: Annotated[str, Field(pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")] = Field(
        default="INFO",
        description="Logging level",
    )
    # DEBUG includes every request (method, path, redacted body) and status.

    json_logs: bool = Field(
        default=False,
        description="Emit JSON log lines",
    )

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Same normalization as Connection, applied at load time."""
        return _normalize_endpoint(v)

    @property
    def connection(self) -> Connection:
        """
        Build the immutable Connection handed to the HTTP client.

        A new value each time; Connection is frozen so callers can share it.
        """
        return Connection(
            endpoint=self.endpoint,
            token=self.token,
            insecure=self.insecure,
            timeout=self.timeout,
        )


# =============================================================================
# SETTINGS LOADER
# =============================================================================


def load_settings(**overrides: Any) -> ProviderSettings:
    """
    Load settings from explicit values, the environment and defaults.

    Keyword arguments whose value is None are treated as "not configured" and
    left for the environment to fill. That is how an unset attribute in the
    provider block behaves.

    OPTIONAL .env FILE:
    -------------------
    If CONTEXTFORGE_ENV_FILE is set, variables are also read from that file.

        CONTEXTFORGE_ENDPOINT=http://localhost:4444
        CONTEXTFORGE_TOKEN=my-dev-token

    Returns:
        Fully validated ProviderSettings instance.

    Raises:
        pydantic.ValidationError: If configuration is invalid.
    """
    explicit = {k: v for k, v in overrides.items() if v is not None}
    return ProviderSettings(
        _env_file=os.environ.get("CONTEXTFORGE_ENV_FILE"),
        **explicit,
    )
