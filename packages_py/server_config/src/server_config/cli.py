"""
figma-fetch command line entry point.
"""
import asyncio
import logging
import sys
from typing import Optional, Sequence

from rich.console import Console

from fetch_fallback import ConfigurationError
from figma_client import FigmaError

from .config import ServerConfig, build_arg_parser, load_server_config
from .factory import create_figma_service
from .printer import print_configuration, render_output

logger = logging.getLogger(__name__)


async def _fetch(config: ServerConfig, file_key: str, node_id: Optional[str], depth: Optional[int]):
    service = create_figma_service(config)
    try:
        if node_id:
            return await service.get_raw_node(file_key, node_id, depth)
        return await service.get_raw_file(file_key, depth)
    finally:
        await service.aclose()
        if service.store is not None:
            await service.store.disconnect()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Print the configuration, or fetch a file/node when --file-key is given.

    Returns:
        Process exit code
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    args = build_arg_parser().parse_args(argv)
    console = Console(stderr=True)

    try:
        config = load_server_config(argv=argv)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        return 2

    if not args.file_key:
        print_configuration(config, console)
        return 0

    try:
        data = asyncio.run(_fetch(config, args.file_key, args.node_id, args.depth))
    except FigmaError as e:
        logger.error(f"figma-fetch: {e}")
        console.print(f"[red]Error:[/red] {e}")
        return 1

    sys.stdout.write(render_output(data, config.output_format))
    if config.output_format == "json":
        sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
