from textile_pos.services.assistant_service import AssistantClient, ChatSessionRegistry
from textile_pos.services.cart import Cart, CartRegistry
from textile_pos.services.checkout import CheckoutOrchestrator, CompletedOrder
from textile_pos.services.dashboard_service import shop_summary
from textile_pos.services.import_service import import_workbook
from textile_pos.services.seed import seed_database

__all__ = [
    "AssistantClient",
    "Cart",
    "CartRegistry",
    "ChatSessionRegistry",
    "CheckoutOrchestrator",
    "CompletedOrder",
    "import_workbook",
    "seed_database",
    "shop_summary",
]
