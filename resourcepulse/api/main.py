"""
FastAPI application for the ResourcePulse what-if scenario service.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from resourcepulse.config import Config
from resourcepulse.database import test_connection
from resourcepulse.engine.errors import WhatIfError
from resourcepulse.api.routes import whatif
from resourcepulse.api.schemas import ErrorResponse

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="ResourcePulse",
    description="What-if capacity scenarios: metrics, comparison and promotion",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_body(message: str, error=None) -> dict:
    """Error envelope; details are withheld in production."""
    if Config.is_production():
        error = {}
    return ErrorResponse(message=message, error=error if error is not None else {}).model_dump()


@app.exception_handler(WhatIfError)
async def whatif_error_handler(request: Request, exc: WhatIfError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.details),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_body("Invalid request", {"errors": errors}),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # Starlette re-raises after this response; the server logs the traceback
    return JSONResponse(
        status_code=500,
        content=error_body("Internal server error", {"type": type(exc).__name__, "detail": str(exc)}),
    )


# Include routers
app.include_router(whatif.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "app": "ResourcePulse"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    db_ok, db_msg = test_connection()
    return {
        "status": "healthy" if db_ok else "unhealthy",
        "database": db_msg
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("resourcepulse.api.main:app", host="0.0.0.0", port=8000, reload=False)
