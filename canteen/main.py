# canteen/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from canteen.api.routers import admin_orders, health, orders
from canteen.data.database import engine, init_db
from canteen.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Initializing database at {engine.url.render_as_string(hide_password=True)}")
    try:
        init_db()
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise
    logger.info("Database tables ready")
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Hospital Meal Order Service",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(health.router)
    app.include_router(orders.router)
    app.include_router(admin_orders.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
