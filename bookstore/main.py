# bookstore/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request

from bookstore.application.interfaces import DocumentStore
from bookstore.config import settings
from bookstore.database import build_store
from bookstore.domain.status_policy import StatusTransitionPolicy, get_policy
from bookstore.infrastructure.security import PasslibPasswordHasher
from bookstore.presentation.books import router as books_router
from bookstore.presentation.carts import router as carts_router
from bookstore.presentation.errors import register_exception_handlers
from bookstore.presentation.orders import router as orders_router
from bookstore.presentation.users import router as users_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the document store for the lifetime of the application"""
    store: DocumentStore = app.state.store
    await store.start()
    logger.info(f"Bookstore API started, order status policy: {app.state.status_policy.name}")

    yield

    await store.close()
    logger.info("Bookstore API stopped")


def create_app(
    store: Optional[DocumentStore] = None,
    status_policy: Optional[StatusTransitionPolicy] = None,
    session_ttl: Optional[int] = None,
) -> FastAPI:
    app = FastAPI(
        title="Bookstore API",
        description="Books, users, carts and orders over a JSON file or a SQL document store",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store or build_store(settings)
    app.state.status_policy = status_policy or get_policy(settings.ORDER_STATUS_POLICY)
    app.state.session_ttl = session_ttl or settings.SESSION_TTL_SECONDS
    app.state.hasher = PasslibPasswordHasher()

    register_exception_handlers(app)
    app.include_router(users_router)
    app.include_router(books_router)
    app.include_router(carts_router)
    app.include_router(orders_router)

    @app.get("/")
    async def root():
        return {"message": "Welcome to the bookstore API", "docs": "/docs"}

    @app.get("/health")
    async def health(request: Request):
        await request.app.state.store.ping()
        return {"status": "healthy", "storage": settings.STORAGE_BACKEND}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
