from decimal import Decimal
from pathlib import Path


APP_DIR = Path(__file__).resolve().parents[1]
PROJECT_ROOT = APP_DIR.parent

TEMPLATES_DIR = APP_DIR / "templates"

PRODUCT_TYPES = ("Fabric", "Yarn", "Accessory", "Ready Made")
UNITS_OF_MEASURE = ("Meters", "Kg", "Pcs", "Box", "Roll")
GST_RATES = (0, 5, 12, 18, 28)
CUSTOMER_TIERS = ("Bronze", "Silver", "Gold")
PAYMENT_METHODS = ("Cash", "Card", "UPI")

# Dollar value of one loyalty point when redeemed.
REDEMPTION_RATE = Decimal("0.10")
# Points accrued per dollar of net sale value.
POINTS_PER_DOLLAR = Decimal("0.1")

CHAT_ERROR_TEXT = "Sorry, I'm having trouble connecting right now."
IMAGE_ERROR_TEXT = "Error analyzing image. Please try again."

DEFAULT_HOME_PATH = "/dashboard/summary"
