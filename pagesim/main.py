import logging
import logging.config

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from pagesim.limiter import limiter
from pagesim.routers.batch import router as batch_router
from pagesim.routers.compare import router as compare_router
from pagesim.routers.paths import router as paths_router
from pagesim.services.documents import DocumentLoadError

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
        "root": {"level": "INFO", "handlers": ["console"]},
    }
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Pagesim – Structural Page Similarity API",
    description=(
        "Compares web pages by the root-to-leaf tag paths of their DOM trees to "
        "find near-duplicates and pages sharing a template."
    ),
    version="1.0.0",
)

# Rate-limiting state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(DocumentLoadError)
async def document_load_error_handler(request: Request, exc: DocumentLoadError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "document": exc.label},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})


app.include_router(compare_router)
app.include_router(paths_router)
app.include_router(batch_router)


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from Pagesim"}
