from fastapi import Depends, Request

from textile_pos.config import Settings
from textile_pos.core.shop_login import ensure_signed_in
from textile_pos.database.session import get_db
from textile_pos.services.assistant_service import AssistantClient, ChatSessionRegistry
from textile_pos.services.cart import CartRegistry


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_login(request: Request, settings: Settings = Depends(get_app_settings)) -> None:
    ensure_signed_in(request, settings)


def get_cart_registry(request: Request) -> CartRegistry:
    return request.app.state.carts


def get_chat_sessions(request: Request) -> ChatSessionRegistry:
    return request.app.state.chat_sessions


def get_assistant(request: Request) -> AssistantClient:
    return request.app.state.assistant


__all__ = [
    "get_app_settings",
    "get_assistant",
    "get_cart_registry",
    "get_chat_sessions",
    "get_db",
    "require_login",
]
