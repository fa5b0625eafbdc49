import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bestworkers.config import settings
from bestworkers.database import init_db
from bestworkers.errors import ServiceError
from bestworkers.routers import auth, professions, users
from bestworkers.utils.logger import configure_logging

configure_logging(settings.log_level)
LOGGER = logging.getLogger(__name__)

app = FastAPI(title="BestWorkers API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(professions.router, prefix="/api")


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        detail = str(first.get("msg", "")).removeprefix("Value error, ")
        message = f"{field}: {detail}" if field else detail
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": "ValidationError", "message": message},
    )


@app.on_event("startup")
def startup() -> None:
    init_db()
    LOGGER.info("Database initialised")


@app.get("/")
def root():
    return {"status": "Backend running"}
