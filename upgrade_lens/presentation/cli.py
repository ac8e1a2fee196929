"""
upgrade-lens - MCP server for framework upgrade assistance.

Usage:
    upgrade-lens serve                      # stdio transport (default)
    upgrade-lens serve --websocket --port 8765
    upgrade-lens serve --kb-path ./kb --timeout 30 --heartbeat 15
    upgrade-lens tools
"""

import asyncio
from typing import Optional

import typer
from pydantic import ValidationError

from upgrade_lens.domain.exceptions.domain_exceptions import DomainError
from upgrade_lens.infrastructure.config.logging_config import configure_logging
from upgrade_lens.infrastructure.config.settings import Settings
from upgrade_lens.infrastructure.mcp.dispatcher import McpDispatcher
from upgrade_lens.infrastructure.mcp.server import McpServer, build_server
from upgrade_lens.infrastructure.transport.stdio_transport import StdioTransport

app = typer.Typer(
    name="upgrade-lens",
    help="MCP server exposing upgrade documentation and project scanners.",
    add_completion=False,
)


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


def _load_settings(**overrides) -> Settings:
    try:
        return Settings().with_overrides(**overrides)
    except ValidationError as e:
        _fail(f"Invalid configuration: {e}")


def _build(settings: Settings) -> McpServer:
    try:
        return build_server(settings)
    except DomainError as e:
        _fail(str(e))


@app.command()
def serve(
    stdio: bool = typer.Option(False, "--stdio", help="Serve over stdin/stdout (default)"),
    websocket: bool = typer.Option(False, "--websocket", help="Serve over WebSocket"),
    host: Optional[str] = typer.Option(None, "--host", help="WebSocket bind host"),
    port: Optional[int] = typer.Option(None, "--port", help="WebSocket bind port"),
    kb_path: Optional[str] = typer.Option(None, "--kb-path", help="Knowledge base directory"),
    timeout: Optional[int] = typer.Option(
        None, "--timeout", help="Tool timeout in seconds (0 disables)"
    ),
    heartbeat: Optional[int] = typer.Option(
        None, "--heartbeat", help="Heartbeat interval in seconds (minimum 10)"
    ),
) -> None:
    """Run the MCP server."""
    if stdio and websocket:
        _fail("Choose either --stdio or --websocket, not both.")
    if timeout is not None and timeout < 0:
        _fail("--timeout must be zero or a positive number of seconds.")

    settings = _load_settings(
        host=host,
        port=port,
        knowledge_base_path=kb_path,
        tool_timeout_seconds=timeout,
        heartbeat_interval=heartbeat,
    )
    configure_logging(settings.log_level)
    server = _build(settings)

    if websocket:
        import uvicorn

        from upgrade_lens.presentation.main import create_app

        uvicorn.run(
            create_app(settings),
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
        )
        return

    transport = StdioTransport(
        McpDispatcher(server), heartbeat_interval=settings.heartbeat_interval
    )
    asyncio.run(transport.run())


@app.command()
def tools(
    kb_path: Optional[str] = typer.Option(None, "--kb-path", help="Knowledge base directory"),
) -> None:
    """List the registered tool names."""
    settings = _load_settings(knowledge_base_path=kb_path)
    configure_logging(settings.log_level)

    for name in _build(settings).registry.list():
        typer.echo(name)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
