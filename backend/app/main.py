import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.main import api_router
from app.core.config import settings
from app.core.db import create_db_engine, init_db
from app.core.logging import setup_logging
from app.services import PDFService, WATIService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open shared resources at startup and release them at shutdown."""
    setup_logging(settings.LOG_LEVEL)

    engine = create_db_engine(settings.SQLALCHEMY_DATABASE_URI)
    init_db(engine)
    app.state.engine = engine
    app.state.pdf_service = PDFService(
        settings.PDF_STORAGE_DIR,
        font_path=settings.PDF_FONT_PATH,
        currency_symbol=settings.CURRENCY_SYMBOL,
    )
    app.state.wati_service = WATIService(settings)
    logger.info("%s started (%s)", settings.PROJECT_NAME, settings.ENVIRONMENT)

    try:
        yield
    finally:
        app.state.wati_service.close()
        engine.dispose()
        logger.info("%s stopped", settings.PROJECT_NAME)


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.all_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_V1_STR)
