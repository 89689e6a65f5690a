"""FastAPI main application."""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import Settings, settings
from .services.directory_resolver import DirectoryResolver
from .services.directory_store import DirectoryStore
from .services.session_registry import SessionRegistry
from .utils.logger import init_app_logger
from .workers.claude import ClaudeStreamer
from .workers.tool_servers import StaticToolServerProvider
from .api.v1 import directories, queries


# Initialize logger
logger = init_app_logger(settings)


async def sweep_sessions(registry: SessionRegistry, config: Settings) -> None:
    """Periodically drop idle sessions until cancelled."""
    while True:
        await asyncio.sleep(config.session_cleanup_interval_seconds)
        registry.cleanup_inactive_sessions(config.session_max_age_seconds)


def build_components(config: Settings):
    """
    Build the bridge components from settings.

    Returns:
        (DirectoryStore, SessionRegistry, ClaudeStreamer)
    """
    resolver = DirectoryResolver(config.get_base_directory())
    store = DirectoryStore(
        resolver,
        config.get_persistence_path(),
        save_debounce_seconds=config.save_debounce_seconds
    )
    registry = SessionRegistry()
    streamer = ClaudeStreamer(
        StaticToolServerProvider(config.mcp_servers),
        binary=config.claude_binary,
        bot_token=config.slack_bot_token,
        permission_server_command=config.permission_server_command,
        permission_server_args=config.permission_server_args
    )
    return store, registry, streamer


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Args:
        app: FastAPI application instance
    """
    logger.info("=" * 70)
    logger.info("Starting Assistant Bridge...")
    logger.info("=" * 70)
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")
    logger.info(f"  Debug: {settings.debug}")
    logger.info(f"  Claude Binary: {settings.claude_binary}")
    logger.info(f"  Base Directory: {settings.get_base_directory() or 'not set'}")
    logger.info(f"  Persistence Path: {settings.get_persistence_path()}")
    logger.info(f"  MCP Servers: {', '.join(settings.mcp_servers) or 'none'}")
    logger.info(f"  Permission Server: {settings.permission_server_command or 'not set, interactive queries disabled'}")

    store, registry, streamer = build_components(settings)

    if await streamer.check_auth():
        logger.info("Claude CLI authentication verified")
    else:
        logger.warning("Claude CLI is not authenticated; run 'claude auth' before sending queries")

    directories.directory_store = store
    queries.session_registry = registry
    queries.streamer = streamer

    sweep_task = asyncio.create_task(sweep_sessions(registry, settings))

    logger.info(f"Assistant Bridge started at http://{settings.host}:{settings.port}")

    yield

    logger.info("Shutting down Assistant Bridge...")
    sweep_task.cancel()
    try:
        await sweep_task
    except asyncio.CancelledError:
        pass

    # Write pending directory changes before exit
    await store.flush()
    logger.info("Assistant Bridge shut down successfully")


# Create FastAPI application
app = FastAPI(
    title="Assistant Bridge",
    description="Resumable Claude Code conversations with per-conversation working directories",
    version="1.0.0",
    lifespan=lifespan
)

app.include_router(directories.router)
app.include_router(queries.router)


@app.get("/health")
async def health():
    """
    Simple health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": "Assistant Bridge"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "assistant_bridge.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
