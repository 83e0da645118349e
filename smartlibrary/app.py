#!/usr/bin/env python3

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from smartlibrary.routes import api
from smartlibrary.configs import OPTIONS, CORS_ORIGINS, DB_URI, LOG_LEVEL, S3_CONFIG
from smartlibrary.core import db as database
from smartlibrary.core.catalog import Catalog
from smartlibrary.core.reservations import ReservationCoordinator
from smartlibrary.core.logging_config import setup_logging
from smartlibrary import __version__ as VERSION


def create_app(engine=None, covers=None):
    """Builds the API around one database engine.

    `covers` defaults to S3 cover storage when an S3 endpoint is
    configured; without one, items can still be created without covers.
    """
    setup_logging(LOG_LEVEL)
    engine = engine or database.make_engine(DB_URI)
    session_factory = database.make_session_factory(engine)
    if covers is None and S3_CONFIG['endpoint']:
        from smartlibrary.core.covers import CoverStore
        covers = CoverStore(S3_CONFIG)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.init(engine)
        yield
        engine.dispose()

    app = FastAPI(
        title="SmartLibrary API",
        description="SmartLibrary: lending copies of catalog items",
        version=VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.coordinator = ReservationCoordinator(session_factory)
    app.state.catalog = Catalog(session_factory, covers=covers)
    app.include_router(api.router, prefix="/v1/api")
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("smartlibrary.app:app", **OPTIONS)
