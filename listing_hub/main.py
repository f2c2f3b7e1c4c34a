import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from listing_hub.api.v1.router import router as v1_router
from listing_hub.core.errors import ListingHubError
from listing_hub.core.telemetry import setup_telemetry
from listing_hub.schemas.common import ErrorResponse

log = logging.getLogger(__name__)

app = FastAPI(title="Listing Hub API", version="0.1.0")

setup_telemetry(app)
app.include_router(v1_router)


@app.exception_handler(ListingHubError)
async def listing_hub_error_handler(request: Request, exc: ListingHubError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    body = ErrorResponse(code=exc.code, message=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())
