"""Users presentation layer: the /v1 user resource routes."""

from users.presentation.routes import router

__all__ = ["router"]
