"""
FastAPI admin server for the hologram store.

``create_app`` wires a ``HologramStore`` into a FastAPI application with
the identity/health endpoints and the hologram routes. The store is
loaded on startup and its live objects are torn down on shutdown.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from holo_server import __version__
from holo_server.api.routes import router
from holo_server.core.store import HologramStore


def create_app(store: HologramStore, *, load_on_startup: bool = True) -> FastAPI:
    """
    Build the FastAPI application around ``store``.

    Args:
        store: The hologram store served by this app
        load_on_startup: Reload the store from storage when the app starts

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        if load_on_startup:
            store.load()
        yield
        store.shutdown()

    app = FastAPI(title="Hologram Server", version=__version__, lifespan=lifespan)
    app.state.store = store

    @app.get("/")
    async def root():
        """Root endpoint showing API identity and current version."""
        return {"message": "Hologram Server API", "version": __version__}

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok", "holograms": len(store), "live_objects": store.live_count}

    app.include_router(router(store))
    return app


def start_server(store: HologramStore, *, host: str, port: int) -> None:
    """Run the admin API with uvicorn until interrupted."""
    import uvicorn

    uvicorn.run(create_app(store), host=host, port=port)
