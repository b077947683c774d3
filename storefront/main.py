# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from storefront.api import register
from storefront.data.database import Base, engine
from storefront.utils.logging import get_logger

# import all models before create_all
import storefront.data.models  # noqa: F401

logger = get_logger(__name__)


def init_db(bind=engine) -> None:
    logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=bind)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    logger.info("Database tables ready")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront",
        version="1.0.0",
        lifespan=lifespan,
    )
    return register(app)


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
