"""
HTTP API
========
FastAPI application, routes and error mapping.
"""

from .app import create_app, main
from .dependencies import AuthContainer, build_container, get_container

__all__ = [
    "create_app",
    "main",
    "AuthContainer",
    "build_container",
    "get_container",
]
