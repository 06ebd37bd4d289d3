from textile_pos.routers.assistant import router as assistant_router
from textile_pos.routers.auth import router as auth_router
from textile_pos.routers.carts import router as carts_router
from textile_pos.routers.customers import router as customers_router
from textile_pos.routers.dashboard import router as dashboard_router
from textile_pos.routers.health import router as health_router
from textile_pos.routers.products import router as products_router
from textile_pos.routers.sales import router as sales_router
from textile_pos.routers.shop_settings import router as shop_settings_router

__all__ = [
    "assistant_router",
    "auth_router",
    "carts_router",
    "customers_router",
    "dashboard_router",
    "health_router",
    "products_router",
    "sales_router",
    "shop_settings_router",
]
