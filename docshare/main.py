import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from docshare.config import CORS_ORIGINS, DATABASE_URL, LOG_LEVEL, UPLOAD_DIR
from docshare.database import Database
from docshare.errors import DocShareError
from docshare.routes import auth, documents, links, share
from docshare.storage import FileStorage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Пул соединений создается при старте и закрывается при остановке"""
    db = Database(app.state.database_url)
    db.create_all()
    app.state.db = db
    logger.info("Database initialized: %s", db.engine.url.render_as_string(hide_password=True))

    yield

    db.dispose()
    logger.info("Database connections closed")


def create_app(database_url: str = DATABASE_URL, upload_dir: str = UPLOAD_DIR) -> FastAPI:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="DocShare API",
        description="Загрузка документов и доступ по защищенным ссылкам",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.database_url = database_url
    app.state.storage = FileStorage(upload_dir)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Подключаем роуты
    app.include_router(auth.router)
    app.include_router(documents.router)
    app.include_router(links.router)
    app.include_router(share.router)

    @app.exception_handler(DocShareError)
    async def docshare_error_handler(request: Request, exc: DocShareError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Validation failed", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/")
    async def root():
        return {"message": "DocShare API Service", "docs": "/docs"}

    @app.get("/health")
    async def health(request: Request):
        try:
            request.app.state.db.ping()
        except SQLAlchemyError as e:
            logger.warning("Health check failed: %s", e)
            return JSONResponse(status_code=503, content={"status": "error", "database": "disconnected"})
        return {"status": "ok", "database": "connected"}

    return app


def run() -> None:
    import uvicorn

    uvicorn.run("docshare.main:app", host="0.0.0.0", port=8000)


app = create_app()
