import logging
import logging.config

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from cmsgraph.config import get_settings
from cmsgraph.ratelimit import limiter
from cmsgraph.routers.stories import router as stories_router
from cmsgraph.routers.webhook import router as webhook_router

logging.config.dictConfig(
    {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
            },
        },
        "root": {"level": get_settings().log_level, "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="cmsgraph – Story Resolution API",
    description=(
        "Loads CMS stories, resolves external data into their content tree, "
        "rewrites links to public URLs and invalidates cached pages on publish."
    ),
    version="1.0.0",
)

# Rate-limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})


app.include_router(stories_router)
app.include_router(webhook_router)


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from cmsgraph"}
