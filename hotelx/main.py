import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hotelx.api.v1.api import api_router
from hotelx.core.config import settings
from hotelx.core.database import async_engine
from hotelx.core.exception_handlers import EXCEPTION_HANDLERS
from hotelx.core.locks import KeyedLock
from hotelx.models.base import Base
from hotelx.services.xendit_client import XenditClient, build_gateway

logger = logging.getLogger(__name__)


def create_app(gateway: Optional[XenditClient] = None) -> FastAPI:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Rooms, guests, bookings and payments for hotel front desks",
        version="1.0.0",
    )

    # One lock registry and one gateway client per application
    app.state.ledger_locks = KeyedLock()
    app.state.payment_gateway = gateway or build_gateway(settings)

    # Register exception handlers
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)

    @app.on_event("startup")
    async def startup():
        async with async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"{settings.PROJECT_NAME} started")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def read_root():
        return {"message": settings.PROJECT_NAME, "version": "1.0.0"}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
