"""
Client configuration.

Provides the immutable connection settings for the intent client, endpoint
parsing, and loading of those settings from environment variables and
.env files.
"""

import ipaddress
import logging
import math
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlsplit

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigurationError, InvalidEndpointError

logger = logging.getLogger(__name__)

DEFAULT_PROCEDURE = "/ondewo.nlu.Sessions/DetectIntent"
DEFAULT_TIMEOUT = 10.0

DEFAULT_CHANNEL_OPTIONS: Tuple[Tuple[str, Any], ...] = (
    ("grpc.keepalive_time_ms", 10000),
    ("grpc.keepalive_timeout_ms", 5000),
)

_SCHEME_PORTS = {"https": 443, "grpcs": 443, "http": 80, "grpc": 80}
_HOSTNAME_LABEL = re.compile(r"^(?!-)[A-Za-z0-9_-]{1,63}(?<!-)$")


class ChannelCredentials(BaseModel):
    """
    Credential material for a TLS channel.

    Attributes:
        root_certificates: PEM-encoded root certificates (None = system roots)
        private_key: PEM-encoded client private key for mutual TLS
        certificate_chain: PEM-encoded client certificate chain for mutual TLS
        access_token: Bearer token sent as call credentials
    """

    root_certificates: Optional[bytes] = None
    private_key: Optional[bytes] = None
    certificate_chain: Optional[bytes] = None
    access_token: Optional[str] = None

    class Config:
        frozen = True

    def is_empty(self) -> bool:
        return not any(
            (self.root_certificates, self.private_key, self.certificate_chain, self.access_token)
        )


class ClientConfig(BaseModel):
    """
    Immutable connection configuration, owned by the caller.

    Attributes:
        endpoint: "host:port", "[ipv6]:port" or a URL (https://host:443)
        secure: Use a TLS channel
        credentials: Credential material, required when secure=True
        environment: Deployment environment; "production" forbids insecure channels
        timeout: Default call deadline in seconds
        procedure: Fully-qualified RPC method name
        channel_options: Extra grpc channel arguments
        metadata: Static metadata sent with every call
    """

    endpoint: str
    secure: bool = False
    credentials: Optional[ChannelCredentials] = None
    environment: str = "development"
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, allow_inf_nan=False)
    procedure: str = DEFAULT_PROCEDURE
    channel_options: Tuple[Tuple[str, Any], ...] = ()
    metadata: Tuple[Tuple[str, str], ...] = ()

    class Config:
        frozen = True

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in ("production", "prod")

    def has_credentials(self) -> bool:
        return self.credentials is not None and not self.credentials.is_empty()

    def grpc_options(self) -> Tuple[Tuple[str, Any], ...]:
        """Channel arguments: keepalive defaults overridden by channel_options."""
        merged = dict(DEFAULT_CHANNEL_OPTIONS)
        merged.update(dict(self.channel_options))
        return tuple(merged.items())


@dataclass(frozen=True)
class Endpoint:
    """A validated host/port pair."""
    host: str
    port: int

    @property
    def target(self) -> str:
        """gRPC target string."""
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def _valid_host(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
        return True
    except ValueError:
        pass
    if len(host) > 253:
        return False
    return all(_HOSTNAME_LABEL.match(label) for label in host.rstrip(".").split("."))


def parse_endpoint(endpoint: str) -> Endpoint:
    """
    Parse and validate an endpoint address.

    Accepts "host:port", "[ipv6]:port", or a URL whose scheme is one of
    http, https, grpc, grpcs. A URL without a port gets its scheme's default.

    Raises:
        InvalidEndpointError: If the address is malformed
    """
    if not endpoint or not endpoint.strip():
        raise InvalidEndpointError(endpoint, "empty address")
    raw = endpoint.strip()

    if "://" in raw:
        parts = urlsplit(raw)
        scheme = parts.scheme.lower()
        if scheme not in _SCHEME_PORTS:
            raise InvalidEndpointError(endpoint, f"unsupported scheme {parts.scheme!r}")
        if parts.path not in ("", "/") or parts.query or parts.fragment:
            raise InvalidEndpointError(endpoint, "URL must not carry a path or query")
        if parts.username or parts.password:
            raise InvalidEndpointError(endpoint, "URL must not carry user info")
        try:
            port = parts.port
        except ValueError:
            raise InvalidEndpointError(endpoint, "port is not a number in 1-65535") from None
        host = parts.hostname or ""
        port = port if port is not None else _SCHEME_PORTS[scheme]
    else:
        if raw.startswith("["):
            close = raw.find("]")
            if close == -1 or raw[close + 1:close + 2] != ":":
                raise InvalidEndpointError(endpoint, "expected [ipv6]:port")
            host, port_text = raw[1:close], raw[close + 2:]
        else:
            host, sep, port_text = raw.rpartition(":")
            if not sep:
                raise InvalidEndpointError(endpoint, "missing port")
            if ":" in host:
                raise InvalidEndpointError(endpoint, "IPv6 hosts must be bracketed")
        if not port_text.isdigit():
            raise InvalidEndpointError(endpoint, f"port {port_text!r} is not a number")
        port = int(port_text)

    if not host:
        raise InvalidEndpointError(endpoint, "missing host")
    if not _valid_host(host):
        raise InvalidEndpointError(endpoint, f"host {host!r} is not a hostname or IP address")
    if not 1 <= port <= 65535:
        raise InvalidEndpointError(endpoint, f"port {port} out of range")

    return Endpoint(host=host, port=port)


def _read_file(path: Optional[str], name: str) -> Optional[bytes]:
    if not path:
        return None
    try:
        return Path(path).expanduser().read_bytes()
    except OSError as e:
        raise ConfigurationError(f"{name}: cannot read {path}: {e.strerror}") from e


def _parse_bool(value: str, name: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off", ""):
        return False
    raise ConfigurationError(f"{name}: {value!r} is not a boolean")


class ConfigLoader:
    """
    Load client configuration from the environment.

    Priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load_client_config()
    """

    def __init__(self, env_file: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            env_file: Path to .env file (default: .env in working directory)
        """
        env_path = Path(env_file) if env_file else Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            logger.info(f"Loaded configuration from {env_path}")
        elif env_file:
            logger.warning(f"Env file {env_file} not found, using environment only")

    def load_credentials(self) -> Optional[ChannelCredentials]:
        """
        Load TLS credential material.

        Environment variables:
        - INTENT_ROOT_CERTS: Path to PEM root certificates
        - INTENT_CLIENT_KEY: Path to PEM client private key
        - INTENT_CLIENT_CERT: Path to PEM client certificate chain
        - INTENT_ACCESS_TOKEN: Bearer token

        Returns:
            ChannelCredentials, or None if nothing is configured
        """
        credentials = ChannelCredentials(
            root_certificates=_read_file(os.getenv("INTENT_ROOT_CERTS"), "INTENT_ROOT_CERTS"),
            private_key=_read_file(os.getenv("INTENT_CLIENT_KEY"), "INTENT_CLIENT_KEY"),
            certificate_chain=_read_file(os.getenv("INTENT_CLIENT_CERT"), "INTENT_CLIENT_CERT"),
            access_token=os.getenv("INTENT_ACCESS_TOKEN") or None,
        )
        return None if credentials.is_empty() else credentials

    def load_client_config(self, **overrides) -> ClientConfig:
        """
        Load client configuration from environment.

        Environment variables:
        - INTENT_ENDPOINT: Service address (required)
        - INTENT_SECURE: Use TLS (default: false)
        - INTENT_ENVIRONMENT: Deployment environment (default: development)
        - INTENT_TIMEOUT: Call deadline in seconds (default: 10)
        - INTENT_PROCEDURE: RPC method (default: /ondewo.nlu.Sessions/DetectIntent)

        Args:
            overrides: Field values taking precedence over the environment;
                None values are ignored

        Returns:
            ClientConfig: Frozen configuration instance

        Raises:
            ConfigurationError: If a value is missing or malformed
        """
        values: Dict[str, object] = {
            "endpoint": os.getenv("INTENT_ENDPOINT"),
            "secure": _parse_bool(os.getenv("INTENT_SECURE", "false"), "INTENT_SECURE"),
            "environment": os.getenv("INTENT_ENVIRONMENT", "development"),
            "procedure": os.getenv("INTENT_PROCEDURE", DEFAULT_PROCEDURE),
            "credentials": self.load_credentials(),
        }
        timeout = os.getenv("INTENT_TIMEOUT")
        try:
            values["timeout"] = float(timeout) if timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ConfigurationError(f"INTENT_TIMEOUT: {timeout!r} is not a number") from None

        values.update({k: v for k, v in overrides.items() if v is not None})
        if not values["endpoint"]:
            raise ConfigurationError("INTENT_ENDPOINT is not set")
        if not math.isfinite(values["timeout"]) or values["timeout"] <= 0:
            raise ConfigurationError(f"timeout must be a positive number, got {values['timeout']}")

        try:
            config = ClientConfig(**values)
        except ValidationError as e:
            raise ConfigurationError(f"invalid client configuration: {e}") from e
        logger.info(
            f"Loaded ClientConfig: endpoint={config.endpoint}, secure={config.secure}, "
            f"environment={config.environment}, timeout={config.timeout}"
        )
        return config
