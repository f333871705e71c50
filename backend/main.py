"""
Commons Landscape — FastAPI Backend
Serves perspective-driven landscape layouts computed from seeded SQLite datasets.
"""
import logging
import os
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse
import uvicorn

from routers import datasets, landscape

logging.basicConfig(
    level=os.environ.get("LANDSCAPE_LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Commons Landscape API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(datasets.router)
app.include_router(landscape.router)


# ── Serve frontend build (must be last) ────────────────────────────────────

FRONTEND_DIST = Path(__file__).parent.parent / "frontend" / "dist"

if FRONTEND_DIST.exists():
    app.mount("/assets", StaticFiles(directory=FRONTEND_DIST / "assets"), name="assets")

    @app.get("/{full_path:path}")
    async def serve_spa(full_path: str):
        """Serve the SPA — return index.html for all non-API routes."""
        index = FRONTEND_DIST / "index.html"
        return FileResponse(index)


def run() -> None:
    """Serve the API; LANDSCAPE_HOST / LANDSCAPE_PORT override the bind address."""
    uvicorn.run(
        app,
        host=os.environ.get("LANDSCAPE_HOST", "127.0.0.1"),
        port=int(os.environ.get("LANDSCAPE_PORT", "8000")),
    )


if __name__ == "__main__":
    run()
