import logging
from typing import Optional

import grpc

from ..config import ChannelCredentials, ClientConfig, Endpoint, parse_endpoint
from ..errors import InsecureChannelError, MissingCredentialsError
from ..observability import create_async_client_interceptors, create_client_interceptors

logger = logging.getLogger(__name__)


def validate_config(config: ClientConfig) -> Endpoint:
    """
    Check a configuration before any channel is built.

    Raises:
        InvalidEndpointError: If the endpoint is malformed
        MissingCredentialsError: If secure=True without credential material,
            or with only one half of a client key pair
        InsecureChannelError: If secure=False in a production environment
    """
    endpoint = parse_endpoint(config.endpoint)
    if config.secure and not config.has_credentials():
        raise MissingCredentialsError(
            f"secure channel to {endpoint.target} requires credential material"
        )
    if config.secure and config.credentials is not None:
        has_key = bool(config.credentials.private_key)
        has_chain = bool(config.credentials.certificate_chain)
        if has_key != has_chain:
            raise MissingCredentialsError(
                "mutual TLS needs both private_key and certificate_chain"
            )
    if not config.secure and config.is_production:
        raise InsecureChannelError(
            f"insecure channel to {endpoint.target} is not allowed in {config.environment}"
        )
    return endpoint


def build_channel_credentials(credentials: ChannelCredentials) -> grpc.ChannelCredentials:
    """TLS channel credentials, composed with bearer-token call credentials if set."""
    channel_credentials = grpc.ssl_channel_credentials(
        root_certificates=credentials.root_certificates or None,
        private_key=credentials.private_key or None,
        certificate_chain=credentials.certificate_chain or None,
    )
    if credentials.access_token:
        return grpc.composite_channel_credentials(
            channel_credentials,
            grpc.access_token_call_credentials(credentials.access_token),
        )
    return channel_credentials


def open_channel(config: ClientConfig, endpoint: Optional[Endpoint] = None) -> grpc.Channel:
    """
    Channel factory. Connection is lazy: no I/O happens until the first call.

    Returns:
        An intercepted channel owned by the caller
    """
    endpoint = endpoint or validate_config(config)
    options = list(config.grpc_options())
    if config.secure:
        channel = grpc.secure_channel(
            endpoint.target, build_channel_credentials(config.credentials), options=options
        )
    else:
        channel = grpc.insecure_channel(endpoint.target, options=options)
    logger.info(f"Initialized {'secure' if config.secure else 'insecure'} channel to {endpoint.target}")
    return grpc.intercept_channel(channel, *create_client_interceptors())


def open_aio_channel(config: ClientConfig, endpoint: Optional[Endpoint] = None) -> grpc.aio.Channel:
    """asyncio channel factory; must be called with a running event loop."""
    endpoint = endpoint or validate_config(config)
    options = list(config.grpc_options())
    interceptors = create_async_client_interceptors()
    if config.secure:
        channel = grpc.aio.secure_channel(
            endpoint.target,
            build_channel_credentials(config.credentials),
            options=options,
            interceptors=interceptors,
        )
    else:
        channel = grpc.aio.insecure_channel(
            endpoint.target, options=options, interceptors=interceptors
        )
    logger.info(f"Initialized {'secure' if config.secure else 'insecure'} aio channel to {endpoint.target}")
    return channel
