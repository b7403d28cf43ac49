"""
Server configuration from CLI arguments, environment and .env files.

Precedence per setting: CLI argument, then environment variable, then default.
"""
import argparse
import logging
import os
from pathlib import Path
from typing import Dict, Literal, Optional, Sequence, Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from credential_store import RedisConfig
from fetch_fallback import ConfigurationError, FallbackConfig, load_fallback_config
from figma_client import FigmaAuthOptions

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3333
OUTPUT_FORMATS = ("yaml", "json")


def mask_api_key(key: Optional[str]) -> str:
    """Show only the last four characters of a secret."""
    if not key or len(key) <= 4:
        return "****"
    return f"****{key[-4:]}"


class ServerConfig(BaseModel):
    """Resolved runtime configuration"""

    auth: FigmaAuthOptions = Field(default_factory=FigmaAuthOptions)
    port: int = DEFAULT_PORT
    output_format: Literal["yaml", "json"] = "yaml"
    skip_image_downloads: bool = False
    redis: Optional[RedisConfig] = None
    log_dir: Optional[str] = None
    fallback: FallbackConfig = Field(default_factory=FallbackConfig)
    env_file: Optional[str] = None
    config_sources: Dict[str, str] = Field(default_factory=dict)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="figma-fetch",
        description="Figma API access with proxy routing and curl fallback",
    )
    parser.add_argument("--figma-api-key", help="Figma API key (Personal Access Token)")
    parser.add_argument("--figma-oauth-token", help="Figma OAuth Bearer token")
    parser.add_argument("--env", help="Path to custom .env file to load environment variables from")
    parser.add_argument("--port", help="Port to run the server on")
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output data in JSON format instead of YAML",
    )
    parser.add_argument(
        "--skip-image-downloads",
        action="store_true",
        help="Do not download images",
    )
    parser.add_argument("--file-key", help="Fetch this Figma file and print it")
    parser.add_argument("--node-id", help="With --file-key: fetch only this node")
    parser.add_argument("--depth", type=int, help="Traversal depth for --file-key")
    return parser


def _load_env_file(env_file: Optional[str]) -> Tuple[str, str]:
    """Load a .env file. Returns (path, source)."""
    if env_file:
        path = Path(env_file).resolve()
        if not path.is_file():
            raise ConfigurationError(f"Env file not found: {path}")
        load_dotenv(path, override=True)
        logger.debug(f"load_server_config: loaded {path} (override=True)")
        return str(path), "cli"

    path = Path.cwd() / ".env"
    if path.is_file():
        load_dotenv(path, override=False)
        logger.debug(f"load_server_config: loaded {path}")
    return str(path), "default"


def _parse_port(raw: str, source: str) -> int:
    try:
        port = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid port from {source}: {raw!r}") from e
    if not 0 < port < 65536:
        raise ConfigurationError(f"Port out of range from {source}: {port}")
    return port


def load_server_config(
    env_file: Optional[str] = None,
    argv: Optional[Sequence[str]] = None,
) -> ServerConfig:
    """
    Build the ServerConfig.

    Args:
        env_file: .env file to load with override. Default: ./.env without override
        argv: CLI arguments (see build_arg_parser). Default: none

    Raises:
        ConfigurationError: If a value is invalid.

    Environment Variables:
        FIGMA_API_KEY, FIGMA_OAUTH_TOKEN: static credentials
        PORT: server port (default: 3333)
        OUTPUT_FORMAT: yaml or json (default: yaml)
        SKIP_IMAGE_DOWNLOADS: "true" to disable image downloads
        REDIS_URL / REDIS_HOST (+ REDIS_*): enable the session credential store
        FIGMA_LOG_DIR: directory for raw API response dumps
        FETCH_FALLBACK_*, FETCH_DEADLINE_SECONDS: see fetch_fallback
    """
    args = build_arg_parser().parse_known_args(list(argv))[0] if argv is not None else None
    cli = vars(args) if args is not None else {}

    env_path, env_source = _load_env_file(cli.get("env") or env_file)
    sources: Dict[str, str] = {"env_file": env_source}

    auth = FigmaAuthOptions()
    sources["figma_api_key"] = "env"
    if cli.get("figma_api_key"):
        auth.figma_api_key = cli["figma_api_key"]
        sources["figma_api_key"] = "cli"
    elif os.getenv("FIGMA_API_KEY"):
        auth.figma_api_key = os.environ["FIGMA_API_KEY"]

    sources["figma_oauth_token"] = "none"
    if cli.get("figma_oauth_token"):
        auth.figma_oauth_token = cli["figma_oauth_token"]
        auth.use_oauth = True
        sources["figma_oauth_token"] = "cli"
    elif os.getenv("FIGMA_OAUTH_TOKEN"):
        auth.figma_oauth_token = os.environ["FIGMA_OAUTH_TOKEN"]
        auth.use_oauth = True
        sources["figma_oauth_token"] = "env"

    port = DEFAULT_PORT
    sources["port"] = "default"
    if cli.get("port"):
        port = _parse_port(cli["port"], "--port")
        sources["port"] = "cli"
    elif os.getenv("PORT"):
        port = _parse_port(os.environ["PORT"], "PORT")
        sources["port"] = "env"

    output_format = "yaml"
    sources["output_format"] = "default"
    if cli.get("json"):
        output_format = "json"
        sources["output_format"] = "cli"
    elif os.getenv("OUTPUT_FORMAT"):
        output_format = os.environ["OUTPUT_FORMAT"].strip().lower()
        if output_format not in OUTPUT_FORMATS:
            raise ConfigurationError(
                f"Invalid OUTPUT_FORMAT: {os.environ['OUTPUT_FORMAT']!r} (expected yaml or json)"
            )
        sources["output_format"] = "env"

    skip_image_downloads = False
    sources["skip_image_downloads"] = "default"
    if cli.get("skip_image_downloads"):
        skip_image_downloads = True
        sources["skip_image_downloads"] = "cli"
    elif os.getenv("SKIP_IMAGE_DOWNLOADS") == "true":
        skip_image_downloads = True
        sources["skip_image_downloads"] = "env"

    redis_config = None
    if os.getenv("REDIS_URL") or os.getenv("REDIS_HOST"):
        redis_config = RedisConfig.from_env()
    sources["redis"] = "env" if redis_config else "default"

    if not auth.figma_api_key and not auth.figma_oauth_token:
        logger.warning(
            "No FIGMA_API_KEY or FIGMA_OAUTH_TOKEN configured. API key will need to be "
            "provided via session_hash."
        )

    return ServerConfig(
        auth=auth,
        port=port,
        output_format=output_format,
        skip_image_downloads=skip_image_downloads,
        redis=redis_config,
        log_dir=os.getenv("FIGMA_LOG_DIR") or None,
        fallback=load_fallback_config(),
        env_file=env_path,
        config_sources=sources,
    )
