"""
CORS for the browser front ends (waiter, manager and admin screens).

Origins come from ALLOWED_ORIGINS. Outside production an unset value
falls back to the local dev servers; in production it allows nothing
and validate_production_settings() reports it.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config.settings import Settings, settings as default_settings


LOCAL_ORIGINS = ("http://localhost:3000", "http://127.0.0.1:3000")

# X-Staff-Id names the caller, X-Request-ID correlates logs
CORS_HEADERS = ("Content-Type", "Accept", "X-Staff-Id", "X-Request-ID")


def cors_origins(config: Settings = default_settings) -> list[str]:
    origins = [o.strip() for o in config.allowed_origins.split(",") if o.strip()]
    if origins or config.environment == "production":
        return origins
    return list(LOCAL_ORIGINS)


def configure_cors(app: FastAPI, config: Settings = default_settings) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(config),
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=list(CORS_HEADERS),
        expose_headers=["X-Request-ID"],
        max_age=600,
    )
