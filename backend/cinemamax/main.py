import logging
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cinemamax.config import VERSION, API_TITLE, API_DESCRIPTION
from cinemamax.config.environment import CORS_ORIGINS
from cinemamax.config.logging import setup_logging
from cinemamax.db.database import engine, Base
from cinemamax.db import models  # registers the tables on Base.metadata
from cinemamax.controllers.auth_controller import router as auth_router
from cinemamax.controllers.movie_controller import router as movie_router
from cinemamax.controllers.user_controller import router as user_router
from cinemamax.controllers.admin_controller import router as admin_router

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=VERSION
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# include controllers
app.include_router(auth_router)
app.include_router(movie_router)
app.include_router(user_router)
app.include_router(admin_router)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"error": message})
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"}
    )


def init_db():
    Base.metadata.create_all(bind=engine)

init_db()


@app.get("/")
def root():
    return {"message": f"{API_TITLE} {VERSION}"}

@app.get("/health")
def health_check():
    return {"status": "healthy"}
