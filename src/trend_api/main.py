"""FastAPI application entry point."""

import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from common.cli_helpers import setup_logging
from trend_api.models.ingest import IngestResponse
from trend_api.routers import health, ingest

load_dotenv()
setup_logging()

app = FastAPI(
    title="Trend Ingest API",
    description="Triggers RSS/Atom trend ingestion runs",
    version="1.0.0",
)

app.include_router(health.router)
app.include_router(ingest.router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies in the ingestion response shape."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    response = IngestResponse(ok=False, error=f"invalid request: {details}")
    return JSONResponse(status_code=422, content=response.model_dump(by_alias=True))


@app.get("/")
def root():
    """API root - returns basic info."""
    return {
        "name": "Trend Ingest API",
        "version": "1.0.0",
        "docs": "/docs",
    }


def main():
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "trend_api.main:app",
        host=os.getenv("TREND_API_HOST", "0.0.0.0"),
        port=int(os.getenv("TREND_API_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
