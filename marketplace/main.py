# marketplace/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
import uvicorn

from marketplace.api import api_router
from marketplace.data.database import engine
from marketplace.data.init_db import init_db
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db(engine)
    yield


async def store_error_handler(request: Request, exc: SQLAlchemyError):
    #store errors never leak details to the client
    logger.error(f"Store error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "Server error, please retry"})


def create_app(init_database: bool = True) -> FastAPI:
    app = FastAPI(
        title="Marketplace Service",
        version="1.0.0",
        lifespan=lifespan if init_database else None,
    )

    app.add_exception_handler(SQLAlchemyError, store_error_handler)
    app.include_router(api_router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
