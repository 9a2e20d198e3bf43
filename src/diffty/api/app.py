"""FastAPI application instance for the diffty API."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..errors import DifftyError
from ..logging_utils import configure_logging
from . import __version__
from .routes import router as api_router

configure_logging()

logger = logging.getLogger(__name__)

# Error code -> HTTP status for known failures
ERROR_STATUS_CODES = {
    "VALIDATION_FAILED": 400,
    "INVALID_REPOSITORY": 400,
    "REPOSITORY_NOT_FOUND": 404,
    "BRANCH_NOT_FOUND": 404,
    "INTEGRITY_FAULT": 500,
    "STORAGE_FAULT": 500,
    "GIT_COMMAND_FAILED": 502,
    "GIT_TIMEOUT": 504,
}

app = FastAPI(
    title="diffty",
    description="Track review decisions on the files of a branch comparison",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.include_router(api_router)


@app.exception_handler(DifftyError)
async def diffty_exception_handler(request: Request, exc: DifftyError):
    """Return the error envelope for known failures."""
    status_code = ERROR_STATUS_CODES.get(exc.code, 500)
    logger.warning(
        "Request failed",
        extra={"code": exc.code, "path_info": str(request.url.path), "status_code": status_code},
    )
    return JSONResponse(
        status_code=status_code,
        content={"ok": False, "error": exc.to_dict()},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return a consistent error envelope for uncaught exceptions."""
    logger.exception("Unhandled error", extra={"path_info": str(request.url.path)})
    return JSONResponse(
        status_code=500,
        content={
            "ok": False,
            "error": {
                "code": "INTERNAL_ERROR",
                "message": f"Internal server error: {str(exc)}",
                "details": {
                    "exception_type": type(exc).__name__,
                    "path": str(request.url.path),
                },
            },
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=10101)
