"""Application factory.

Run with ``uvicorn textile_pos.main:create_app --factory``.
"""
import secrets
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from textile_pos.config import Settings, get_settings
from textile_pos.core.constants import DEFAULT_HOME_PATH, TEMPLATES_DIR
from textile_pos.core.logging import setup_logging
from textile_pos.core.money import format_money
from textile_pos.database import Database, init_database
from textile_pos.routers import (
    assistant_router,
    auth_router,
    carts_router,
    customers_router,
    dashboard_router,
    health_router,
    products_router,
    sales_router,
    shop_settings_router,
)
from textile_pos.services.assistant_service import AssistantClient, ChatSessionRegistry
from textile_pos.services.cart import CartRegistry


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)
    if database is None:
        database = init_database(settings.DATABASE_URL, seed=settings.SEED_ON_STARTUP)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        try:
            yield
        finally:
            database.dispose()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.carts = CartRegistry(idle_seconds=settings.CART_IDLE_MINUTES * 60)
    app.state.chat_sessions = ChatSessionRegistry(idle_seconds=settings.CHAT_IDLE_MINUTES * 60)
    app.state.assistant = AssistantClient(settings)

    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters["money"] = format_money
    app.state.templates = templates

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET or secrets.token_urlsafe(32),
        session_cookie=settings.SESSION_COOKIE,
        same_site="lax",
        https_only=settings.ENVIRONMENT.lower() != "local",
    )

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(products_router)
    app.include_router(customers_router)
    app.include_router(carts_router)
    app.include_router(sales_router)
    app.include_router(shop_settings_router)
    app.include_router(assistant_router)
    app.include_router(dashboard_router)

    @app.get("/")
    def root():
        return RedirectResponse(url=DEFAULT_HOME_PATH, status_code=302)

    return app


__all__ = ["create_app"]
