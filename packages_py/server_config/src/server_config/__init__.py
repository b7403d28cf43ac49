"""
server_config - Runtime configuration and wiring for the Figma fetch layer.

Example:
    >>> from server_config import load_server_config, print_configuration, create_figma_service
    >>>
    >>> config = load_server_config()
    >>> print_configuration(config)
    >>> async with create_figma_service(config) as figma:
    ...     data = await figma.get_raw_file("abc123")
"""
from .config import (
    DEFAULT_PORT,
    ServerConfig,
    build_arg_parser,
    load_server_config,
    mask_api_key,
)
from .printer import print_configuration, render_output
from .factory import create_credential_store, create_figma_service

__all__ = [
    "DEFAULT_PORT",
    "ServerConfig",
    "build_arg_parser",
    "load_server_config",
    "mask_api_key",
    "print_configuration",
    "render_output",
    "create_credential_store",
    "create_figma_service",
]

__version__ = "1.0.0"
