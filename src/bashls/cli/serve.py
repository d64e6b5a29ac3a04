import logging
from typing import Annotated

import typer

from bashls.config import ServerConfig


def serve(
    tcp: Annotated[bool, typer.Option(help="Listen on TCP instead of stdio.")] = False,
    host: Annotated[str, typer.Option(help="TCP host.")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="TCP port.")] = 2087,
) -> None:
    """Start the language server."""
    from bashls.lsp.server import build_bash_server, create_language_server

    config = ServerConfig.from_env()
    # stdout carries the protocol stream
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    server = create_language_server(build_bash_server(config))
    if tcp:
        server.start_tcp(host, port)
    else:
        server.start_io()
