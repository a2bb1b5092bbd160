"""
CORS Configuration

Configures Cross-Origin Resource Sharing settings.
"""

import os
from copy import deepcopy
from dataclasses import dataclass, field
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


@dataclass
class CORSConfig:
    """CORS configuration settings."""

    allowed_origins: List[str] = field(default_factory=list)

    # Session cookies and Basic credentials
    allow_credentials: bool = True

    allowed_methods: List[str] = field(default_factory=lambda: [
        "GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"
    ])

    allowed_headers: List[str] = field(default_factory=lambda: [
        "Accept",
        "Accept-Language",
        "Content-Type",
        "Content-Language",
        "Authorization",
        "X-Request-ID",
    ])

    expose_headers: List[str] = field(default_factory=lambda: [
        "X-Request-ID",
    ])

    # Max age for preflight cache (in seconds)
    max_age: int = 3600

    # Development only
    allow_all_origins: bool = False


CORS_CONFIGS = {
    "development": CORSConfig(
        allowed_origins=[
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ],
        allow_all_origins=True,
    ),
    "staging": CORSConfig(
        allowed_origins=[
            "https://staging.homeservices.example.com",
        ],
    ),
    "production": CORSConfig(
        allowed_origins=[
            "https://homeservices.example.com",
            "https://app.homeservices.example.com",
        ],
        max_age=7200,
    ),
}


def get_cors_config(environment: Optional[str] = None) -> CORSConfig:
    """Get CORS configuration for the environment."""
    if environment is None:
        environment = os.getenv("HOMESERVICES_ENV", "development")

    config = deepcopy(CORS_CONFIGS.get(environment, CORS_CONFIGS["development"]))

    # Allow additional origins from environment variable
    extra_origins = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if extra_origins:
        config.allowed_origins.extend(
            origin.strip() for origin in extra_origins.split(",") if origin.strip()
        )

    return config


def setup_cors(app: FastAPI, config: Optional[CORSConfig] = None) -> None:
    """
    Configure CORS middleware for the FastAPI application.

    Args:
        app: FastAPI application instance.
        config: CORS configuration. If None, loads from environment.
    """
    if config is None:
        config = get_cors_config()

    if config.allow_all_origins:
        allow_origins = ["*"]
    else:
        allow_origins = config.allowed_origins

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=config.allow_credentials if not config.allow_all_origins else False,
        allow_methods=config.allowed_methods,
        allow_headers=config.allowed_headers,
        expose_headers=config.expose_headers,
        max_age=config.max_age,
    )
