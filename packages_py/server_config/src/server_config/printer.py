"""
Console output for configuration and fetched data.
"""
import json
from typing import Any, Optional

import yaml
from rich.console import Console
from rich.table import Table

from .config import ServerConfig, mask_api_key


def print_configuration(config: ServerConfig, console: Optional[Console] = None) -> None:
    """Print the resolved configuration as a table with secrets masked."""
    console = console or Console()
    sources = config.config_sources

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_column("Source", style="dim")

    table.add_row("ENV_FILE", str(config.env_file), sources.get("env_file", ""))
    if config.auth.use_oauth:
        table.add_row(
            "FIGMA_OAUTH_TOKEN",
            mask_api_key(config.auth.figma_oauth_token),
            sources.get("figma_oauth_token", ""),
        )
        table.add_row("Authentication Method", "OAuth Bearer Token", "")
    else:
        table.add_row(
            "FIGMA_API_KEY",
            mask_api_key(config.auth.figma_api_key),
            sources.get("figma_api_key", ""),
        )
        table.add_row("Authentication Method", "Personal Access Token (X-Figma-Token)", "")
    table.add_row("PORT", str(config.port), sources.get("port", ""))
    table.add_row("OUTPUT_FORMAT", config.output_format, sources.get("output_format", ""))
    table.add_row(
        "SKIP_IMAGE_DOWNLOADS",
        str(config.skip_image_downloads).lower(),
        sources.get("skip_image_downloads", ""),
    )
    if config.redis:
        table.add_row("REDIS", config.redis.masked_url, sources.get("redis", ""))
    else:
        table.add_row("REDIS", "Not configured", sources.get("redis", ""))
    table.add_row("FIGMA_LOG_DIR", config.log_dir or "-", "")
    table.add_row(
        "FETCH_FALLBACK",
        f"enabled={config.fallback.enabled}, curl={config.fallback.curl_binary}, "
        f"deadline={config.fallback.deadline_seconds}",
        "",
    )

    console.print(table)


def render_output(data: Any, output_format: str) -> str:
    """
    Serialize fetched data for display.

    Raises:
        ValueError: If `output_format` is not yaml or json.
    """
    if output_format == "json":
        return json.dumps(data, indent=2)
    if output_format == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    raise ValueError(f"Unknown output format: {output_format!r}")
