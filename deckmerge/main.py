# deckmerge/main.py
from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Iterable

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from deckmerge.api import routers
from deckmerge.core.config import get_settings
from deckmerge.core.logging import configure_logging

WEB_DIR = Path(__file__).resolve().parent / "web"

settings = get_settings()
logger = configure_logging()

app = FastAPI(title=settings.app_name, version=settings.app_version)


def _as_list(val: Iterable | str | None, fallback: list[str]) -> list[str]:
    if val is None:
        return fallback
    if isinstance(val, (list, tuple, set)):
        return [str(x).strip() for x in val if str(x).strip()] or fallback
    s = str(val).strip()
    if not s:
        return fallback
    # accepts "a,b,c" or a JSON list such as '["a","b"]'
    if s.startswith("["):
        try:
            return [str(x).strip() for x in json.loads(s) if str(x).strip()]
        except ValueError:
            logger.warning("Ignoring malformed origin list: %s", s)
            return fallback
    return [x.strip() for x in s.split(",") if x.strip()]


app.add_middleware(
    CORSMiddleware,
    allow_origins=_as_list(settings.allow_origins, fallback=["*"]),
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in routers:
    app.include_router(router)


@app.get("/health")
async def health_check() -> dict:
    logger.debug("Health check invoked")
    return {"status": "ok", "message": "Deck merge service is running"}


def sync_web_assets(source: Path, public_dir: Path) -> list[Path]:
    """Copy the bundled upload page into the public root, leaving files already there alone."""
    copied = []
    for asset in sorted(source.iterdir()):
        target = public_dir / asset.name
        if asset.is_file() and not target.exists():
            shutil.copy2(asset, target)
            copied.append(target)
    return copied


for path in sync_web_assets(WEB_DIR, settings.public_dir):
    logger.info("Installed web asset %s", path.name)

# Merged decks first, then everything else in the public root.
app.mount("/output", StaticFiles(directory=str(settings.output_dir)), name="output")
app.mount("/", StaticFiles(directory=str(settings.public_dir), html=True), name="public")
