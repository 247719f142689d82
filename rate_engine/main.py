import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rate_engine import __version__
from rate_engine.config import settings

# ─── Logging setup (console + optional file) ───
_log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

_handlers: list[logging.Handler] = [logging.StreamHandler()]
if settings.log_file:
    _log_path = Path(settings.log_file)
    _log_path.parent.mkdir(parents=True, exist_ok=True)
    _handlers.append(
        RotatingFileHandler(
            _log_path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
    )

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=_handlers,
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from rate_engine.routers import contracts, pricing

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Rate Engine",
    description="Contract policy and selling-rate resolution for tour operators",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(contracts.router, prefix=f"{settings.api_prefix}/contracts", tags=["contracts"])
app.include_router(pricing.router, prefix=f"{settings.api_prefix}/pricing", tags=["pricing"])


@app.get(f"{settings.api_prefix}/health")
async def health_check():
    return {"status": "ok", "service": "rate-engine", "version": __version__}
