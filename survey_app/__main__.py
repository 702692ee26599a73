"""Run the service with uvicorn: `python -m survey_app`."""

from __future__ import annotations

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "survey_app.main:create_app",
        factory=True,
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "3000")),
    )


if __name__ == "__main__":
    main()
