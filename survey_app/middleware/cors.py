"""CORS configuration helper.

Browser clients are served from a separate origin (CLIENT_URL) and send
credentials, so origins are listed explicitly rather than wildcarded.
"""

from __future__ import annotations

from typing import Iterable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

EXPOSE_HEADERS: list[str] = ["X-Request-Id", "Content-Disposition"]


def apply_cors(app: FastAPI, *, origins: Iterable[str] | None = None) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(origins or []),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=EXPOSE_HEADERS,
    )


__all__ = ["apply_cors", "EXPOSE_HEADERS"]
