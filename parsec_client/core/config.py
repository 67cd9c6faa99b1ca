"""
Client Configuration
====================

Immutable configuration accepted when a client is created.

The construction input is a closed union of exactly three shapes:
    1. DefaultConfig: default endpoint, pick an authenticator needing no data
    2. AppNameConfig: default endpoint, Direct authenticator with this name
    3. ExplicitConfig: endpoint (or open transport) plus per-authenticator data

Anything else is rejected with ConfigError at the boundary, and every
authenticator payload is validated here rather than during negotiation.

Environment overrides:
    PARSEC_SERVICE_ENDPOINT=unix:/run/parsec/parsec.sock
    PARSEC_CLIENT_LOG_LEVEL=DEBUG
    PARSEC_CLIENT_LOG_CONSOLE=false
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Final, Mapping, Optional, Union

from parsec_client.auth.authenticators import AuthenticatorType
from parsec_client.core.errors import ConfigError
from parsec_client.utils.validators import ValidationError, validate_app_name

if TYPE_CHECKING:
    from parsec_client.algorithm.encoding import AlgorithmEncoder
    from parsec_client.transport.base import Transport


ENDPOINT_ENV_VAR: Final[str] = "PARSEC_SERVICE_ENDPOINT"
DEFAULT_ENDPOINT: Final[str] = "unix:/run/parsec/parsec.sock"

_LOG_ENV_PREFIX: Final[str] = "PARSEC_CLIENT_LOG_"


def default_endpoint() -> str:
    """Endpoint used when the configuration does not name one."""
    return os.environ.get(ENDPOINT_ENV_VAR) or DEFAULT_ENDPOINT


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Immutable logging configuration."""

    level: str = "WARNING"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format: str = "%H:%M:%S"
    enable_console: bool = True
    enable_json: bool = False

    def __post_init__(self) -> None:
        """Validate logging settings."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.level.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {self.level}")

    @classmethod
    def from_env(cls) -> LoggingConfig:
        """Load logging configuration with PARSEC_CLIENT_LOG_* overrides."""
        kwargs: dict[str, Any] = {}
        for key, value in os.environ.items():
            if not key.startswith(_LOG_ENV_PREFIX):
                continue
            name = key[len(_LOG_ENV_PREFIX):].lower()
            if name == "level":
                kwargs["level"] = value.upper()
            elif name == "console":
                kwargs["enable_console"] = value.lower() == "true"
            elif name == "json":
                kwargs["enable_json"] = value.lower() == "true"
        return cls(**kwargs)


@dataclass(frozen=True, slots=True)
class DefaultConfig:
    """Use the default endpoint and the first authenticator needing no data."""

    @property
    def connection(self) -> None:
        return None

    @property
    def authenticator_data(self) -> Mapping[AuthenticatorType, Any]:
        return MappingProxyType({})

    @property
    def encoder(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class AppNameConfig:
    """Use the default endpoint and a Direct authenticator with this name."""

    app_name: str

    def __post_init__(self) -> None:
        try:
            validate_app_name(self.app_name)
        except ValidationError as e:
            raise ConfigError(str(e)) from e

    def __repr__(self) -> str:
        return "AppNameConfig(app_name=...)"

    @property
    def connection(self) -> None:
        return None

    @property
    def authenticator_data(self) -> Mapping[AuthenticatorType, Any]:
        return MappingProxyType({AuthenticatorType.DIRECT: self.app_name})

    @property
    def encoder(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class ExplicitConfig:
    """
    Fully specified client configuration.

    Attributes:
        connection: Endpoint URL, an already open Transport, or None for
            the default endpoint
        authenticator_data: Configuration payload per authenticator kind.
            At most one entry per kind; Direct takes an application name.
        encoder: Replacement algorithm encoder, None for the built-in one
    """

    connection: Union[str, "Transport", None] = None
    authenticator_data: Mapping[AuthenticatorType, Any] = field(default_factory=dict)
    encoder: Optional["AlgorithmEncoder"] = None

    def __post_init__(self) -> None:
        if not isinstance(self.authenticator_data, Mapping):
            raise ConfigError("authenticator_data must be a mapping")

        validated: dict[AuthenticatorType, Any] = {}
        for raw_kind, payload in self.authenticator_data.items():
            try:
                kind = AuthenticatorType(raw_kind)
            except ValueError as e:
                raise ConfigError(f"Unknown authenticator kind: {raw_kind!r}") from e
            if kind in validated:
                raise ConfigError(f"Duplicate configuration for {kind.name}")
            if kind == AuthenticatorType.DIRECT:
                try:
                    validate_app_name(payload)
                except ValidationError as e:
                    raise ConfigError(f"Invalid Direct authenticator data: {e}") from e
            validated[kind] = payload

        if self.connection is not None and not isinstance(self.connection, str):
            if not callable(getattr(self.connection, "call", None)):
                raise ConfigError(
                    f"connection must be an endpoint string or a Transport, "
                    f"got {type(self.connection).__name__}"
                )
        if self.encoder is not None and not callable(self.encoder):
            raise ConfigError("encoder must be callable")

        # Freeze the mapping so the config stays immutable.
        object.__setattr__(self, "authenticator_data", MappingProxyType(validated))

    def __repr__(self) -> str:
        """Safe representation without authenticator payloads."""
        kinds = ", ".join(kind.name for kind in self.authenticator_data)
        target = self.connection if isinstance(self.connection, str) else type(self.connection).__name__
        return f"ExplicitConfig(connection={target}, authenticators=[{kinds}])"


ClientConfig = Union[DefaultConfig, AppNameConfig, ExplicitConfig]


def direct_auth_config(app_name: str) -> AppNameConfig:
    """Configuration selecting a Direct authenticator for app_name."""
    return AppNameConfig(app_name)


def normalize_config(value: Any = None) -> ClientConfig:
    """
    Turn the construction input into one of the ClientConfig variants.

    Args:
        value: None, an application name, or a ClientConfig variant

    Returns:
        The matching ClientConfig variant

    Raises:
        ConfigError: If value has any other shape or fails validation
    """
    if value is None:
        return DefaultConfig()
    if isinstance(value, str):
        return AppNameConfig(value)
    if isinstance(value, (DefaultConfig, AppNameConfig, ExplicitConfig)):
        return value
    raise ConfigError(f"Could not create configuration from type {type(value).__name__}")
