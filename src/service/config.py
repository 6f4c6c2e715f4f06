"""
Configuration setup for the Rizzler service.

This module handles HTTP-level configuration:
- CORS settings
- Session cookie parameters
"""
import os
import logging
from dataclasses import dataclass
from typing import Tuple

logger = logging.getLogger('rizzler.service.config')

SESSION_COOKIE_NAME = "session_id"
SESSION_HEADER_NAME = "X-Session-Id"


def get_cors_config() -> Tuple[list[str], list[str], list[str]]:
    """
    Parse and return CORS configuration from environment variables.

    Returns:
        Tuple containing (origins, methods, headers) lists
    """
    cors_allowed_origins = os.getenv("CORS_ALLOWED_ORIGINS", "").split(",")
    cors_allowed_origins = [origin.strip() for origin in cors_allowed_origins if origin.strip()]

    # Development fallback
    if not cors_allowed_origins:
        logger.warning("CORS_ALLOWED_ORIGINS not set, using development defaults")
        cors_allowed_origins = [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]

    cors_allowed_methods = os.getenv("CORS_ALLOWED_METHODS", "GET,POST,OPTIONS").split(",")
    cors_allowed_methods = [method.strip() for method in cors_allowed_methods if method.strip()]

    cors_allowed_headers = os.getenv("CORS_ALLOWED_HEADERS", f"Content-Type,{SESSION_HEADER_NAME}").split(",")
    cors_allowed_headers = [header.strip() for header in cors_allowed_headers if header.strip()]

    return cors_allowed_origins, cors_allowed_methods, cors_allowed_headers


@dataclass(frozen=True)
class CookieConfig:
    secure: bool = True
    samesite: str = "lax"
    max_age: int = 24 * 60 * 60

    @classmethod
    def from_env(cls, max_age: int) -> "CookieConfig":
        # For development, allow insecure cookies over HTTP
        secure = os.getenv("SECURE_COOKIES", "true").lower() == "true"
        return cls(secure=secure, max_age=max_age)


__all__ = [
    'SESSION_COOKIE_NAME',
    'SESSION_HEADER_NAME',
    'get_cors_config',
    'CookieConfig',
]
