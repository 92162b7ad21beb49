"""HTTP proxy: geocoding plus forecast with server-side credential injection."""
from __future__ import annotations

from typing import Iterator, Optional

import httpx
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, build_logger
from .errors import (
    IncompleteUpstreamData,
    MissingLocation,
    PlaceNotFound,
    SkyAgentError,
    UpstreamUnavailable,
)
from .models import Dashboard
from .service import build_dashboard

APP_NAME = "SkyAgent API"

STATUS_BY_ERROR = {
    MissingLocation: 400,
    PlaceNotFound: 404,
    UpstreamUnavailable: 502,
    IncompleteUpstreamData: 502,
}


def get_settings() -> Settings:
    return Settings()


def get_http_client() -> Iterator[httpx.Client]:
    # closed once the request is done, aborted requests included
    with httpx.Client() as client:
        yield client


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    build_logger(settings.log_level)

    app = FastAPI(title=APP_NAME, version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/api/weather", response_model=Dashboard)
    def weather(
        city: Optional[str] = Query(default=None),
        lat: Optional[float] = Query(default=None),
        lon: Optional[float] = Query(default=None),
        cfg: Settings = Depends(get_settings),
        client: httpx.Client = Depends(get_http_client),
    ) -> Dashboard:
        if cfg.provider == "meteomatics" and not (cfg.meteomatics_username and cfg.meteomatics_password):
            raise HTTPException(status_code=500, detail="Meteomatics credentials not set")
        try:
            return build_dashboard(cfg, query=city, latitude=lat, longitude=lon, client=client)
        except SkyAgentError as e:
            raise HTTPException(status_code=STATUS_BY_ERROR.get(type(e), 500), detail=e.message) from e

    return app


app = create_app()
