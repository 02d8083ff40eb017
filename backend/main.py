from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import pins as pins_api
from api import redlining as redlining_api
from cache.lru import QueryCache
from pins.store import InMemoryPinStore, PinStore
from redlining.loader import load_dataset
from redlining.types import GeoDataset
from settings.config import Settings, load_settings
from settings.log import configure_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    dataset: GeoDataset | None = None,
    cache: QueryCache | None = None,
    pin_store: PinStore | None = None,
) -> FastAPI:
    """
    Build the API app.

    The dataset is loaded (from `settings.data_path` unless one is passed in) before the
    app is returned, so no request can observe a half-loaded dataset. Each call gives an
    independent app with its own cache and pin store.
    """
    s = settings or load_settings()
    if dataset is None:
        dataset = load_dataset(s.data_path)

    app = FastAPI(title="Redlining API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=s.cors_origins,
        allow_credentials="*" not in s.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = s
    app.state.redlining = redlining_api.build_context(
        dataset, cache or QueryCache(max_size=s.cache_size)
    )
    app.state.pins = pin_store if pin_store is not None else InMemoryPinStore()

    app.include_router(redlining_api.router)
    app.include_router(pins_api.router)
    return app


@lru_cache(maxsize=1)
def get_app() -> FastAPI:
    """The process-wide app, built on first use from `load_settings()`."""
    configure_logging(load_settings().log_level)
    return create_app()


def __getattr__(name: str):
    # `uvicorn main:app` builds the app here, on first access.
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def serve() -> None:
    import uvicorn

    app = get_app()
    s = app.state.settings
    logger.info("Starting redlining API on %s:%d", s.host, s.port)
    uvicorn.run(app, host=s.host, port=s.port, log_level=s.log_level.lower())


if __name__ == "__main__":
    serve()
