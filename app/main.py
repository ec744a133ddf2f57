import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routers import plans
from app.core.config import settings
from app.core.errors import LOCATION_REQUIRED, APIError, error_content
from app.core.logging import setup_logging

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.project_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(plans.router, prefix=settings.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    if isinstance(exc, APIError):
        return JSONResponse(status_code=exc.status_code, content=exc.content(), headers=exc.headers)
    code = "not_found" if exc.status_code == status.HTTP_404_NOT_FOUND else "validation_error" if 400 <= exc.status_code < 500 else "internal_error"
    return JSONResponse(status_code=exc.status_code, content=error_content(code, str(exc.detail)), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    # The only client-supplied field is the location, so any body problem maps to the same 400
    first_error = exc.errors()[0] if exc.errors() else {}
    logger.info("Rejected plan request body: %s", first_error.get("msg"))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": LOCATION_REQUIRED})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled server error: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_content("internal_error", "Ha ocurrido un error en el servidor."),
    )
