import logging
from pathlib import Path

from openpyxl import load_workbook
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from textile_pos.core.constants import PRODUCT_TYPES, UNITS_OF_MEASURE
from textile_pos.database.session import Database
from textile_pos.models.product import Product

logger = logging.getLogger(__name__)

_ALIAS_SPECS = (
    (("product", "name"), "name"),
    (("item", "name"), "name"),
    (("name",), "name"),
    (("category",), "type"),
    (("product", "type"), "type"),
    (("type",), "type"),
    (("material",), "material"),
    (("fabric",), "material"),
    (("color",), "color"),
    (("colour",), "color"),
    (("variant",), "variant"),
    (("uom",), "unit"),
    (("unit",), "unit"),
    (("hsn",), "hsn_code"),
    (("hsn", "code"), "hsn_code"),
    (("gst",), "tax_rate"),
    (("gst", "rate"), "tax_rate"),
    (("tax", "rate"), "tax_rate"),
    (("price",), "price"),
    (("selling", "price"), "price"),
    (("cost", "price"), "cost_price"),
    (("stock",), "stock"),
    (("qty",), "stock"),
    (("quantity",), "stock"),
    (("min", "stock"), "min_stock_level"),
    (("min", "stock", "level"), "min_stock_level"),
    (("reorder", "level"), "min_stock_level"),
    (("sku",), "sku"),
    (("supplier",), "supplier"),
    (("supplier", "name"), "supplier"),
    (("description",), "description"),
    (("image",), "image_url"),
    (("image", "url"), "image_url"),
)

HEADER_ALIASES = {"".join(parts): target for parts, target in _ALIAS_SPECS}

REQUIRED_COLUMNS = {"name", "type", "unit", "hsn_code", "tax_rate", "price", "stock", "sku"}

_TYPE_LOOKUP = {value.replace(" ", "").lower(): value for value in PRODUCT_TYPES}
_UNIT_LOOKUP = {value.lower(): value for value in UNITS_OF_MEASURE}


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_header(value):
    if value is None:
        return ""
    value_text = str(value).strip().lower()
    if not value_text:
        return ""
    for char in (" ", "-", ".", "/"):
        value_text = value_text.replace(char, "_")
    value_text = "_".join(part for part in value_text.split("_") if part)
    alias = HEADER_ALIASES.get(value_text)
    if alias:
        return alias
    alias = HEADER_ALIASES.get(value_text.replace("_", ""))
    if alias:
        return alias
    return value_text


def to_str(value, field, required=True):
    if _is_blank(value):
        if required:
            raise ValueError(f"{field} is required")
        return None
    return str(value).strip()


def to_float(value, field, required=True, default=None):
    if _is_blank(value):
        if required:
            raise ValueError(f"{field} is required")
        return default
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field} must be a number") from None
    if number < 0:
        raise ValueError(f"{field} must be non-negative")
    return number


def to_product_type(value):
    text = to_str(value, "type")
    key = text.replace(" ", "").replace("-", "").replace("_", "").lower()
    if key not in _TYPE_LOOKUP:
        raise ValueError("type must be one of: {}".format(", ".join(PRODUCT_TYPES)))
    return _TYPE_LOOKUP[key]


def to_unit(value):
    text = to_str(value, "unit")
    if text.lower() not in _UNIT_LOOKUP:
        raise ValueError("unit must be one of: {}".format(", ".join(UNITS_OF_MEASURE)))
    return _UNIT_LOOKUP[text.lower()]


def load_sheet_rows(worksheet):
    rows_iter = worksheet.iter_rows(values_only=True)
    headers = next(rows_iter, None)
    if not headers:
        return [], set()
    header_keys = [normalize_header(header) for header in headers]
    indices = [(idx, key) for idx, key in enumerate(header_keys) if key]
    columns = {key for key in header_keys if key}

    rows = []
    for row in rows_iter:
        if row is None or all(_is_blank(value) for value in row):
            continue
        rows.append({key: row[idx] if idx < len(row) else None for idx, key in indices})
    return rows, columns


def validate_columns(columns):
    missing = sorted(REQUIRED_COLUMNS - columns)
    if missing:
        raise ValueError("products sheet missing columns: {}".format(", ".join(missing)))


def build_product_values(row):
    return {
        "name": to_str(row.get("name"), "name"),
        "type": to_product_type(row.get("type")),
        "material": to_str(row.get("material"), "material", required=False) or "",
        "color": to_str(row.get("color"), "color", required=False) or "",
        "variant": to_str(row.get("variant"), "variant", required=False) or "",
        "unit": to_unit(row.get("unit")),
        "hsn_code": to_str(row.get("hsn_code"), "hsn_code"),
        "tax_rate": to_float(row.get("tax_rate"), "tax_rate"),
        "price": to_float(row.get("price"), "price"),
        "cost_price": to_float(row.get("cost_price"), "cost_price", required=False),
        "stock": to_float(row.get("stock"), "stock"),
        "min_stock_level": to_float(row.get("min_stock_level"), "min_stock_level", required=False, default=0.0),
        "sku": to_str(row.get("sku"), "sku"),
        "supplier": to_str(row.get("supplier"), "supplier", required=False),
        "description": to_str(row.get("description"), "description", required=False),
        "image_url": to_str(row.get("image_url"), "image_url", required=False),
    }


def upsert_product(db, row):
    values = build_product_values(row)
    product = db.execute(select(Product).where(Product.sku == values["sku"])).scalars().first()
    if product:
        for key, value in values.items():
            setattr(product, key, value)
        return "updated"
    db.add(Product(**values))
    return "inserted"


def import_rows(db, rows):
    counts = {"inserted": 0, "updated": 0, "skipped": 0, "errors": []}
    seen_skus = set()
    for row_no, row in enumerate(rows, start=2):
        sku = str(row.get("sku") or "").strip()
        if sku and sku in seen_skus:
            counts["skipped"] += 1
            counts["errors"].append(f"row {row_no}: duplicate sku {sku}")
            continue
        try:
            action = upsert_product(db, row)
        except ValueError as exc:
            counts["skipped"] += 1
            counts["errors"].append(f"row {row_no}: {exc}")
            continue
        seen_skus.add(sku)
        counts[action] += 1
        db.flush()
    return counts


def import_workbook(database: Database, workbook_path, sheet=None, dry_run=False):
    """Bulk insert or update catalog products from an ``.xlsx`` workbook.

    Rows are matched to existing products by SKU. Invalid rows are skipped and
    reported; the remaining rows are committed together unless ``dry_run``.
    """
    workbook_path = Path(workbook_path)
    if not workbook_path.exists():
        raise FileNotFoundError(f"File not found: {workbook_path}")
    if workbook_path.suffix.lower() != ".xlsx":
        raise ValueError("Only .xlsx files are supported.")

    workbook = load_workbook(workbook_path, data_only=True)
    if sheet:
        if sheet not in workbook.sheetnames:
            raise ValueError(f"Sheet not found: {sheet}")
        worksheet = workbook[sheet]
    else:
        worksheet = workbook[workbook.sheetnames[0]]

    rows, columns = load_sheet_rows(worksheet)
    validate_columns(columns)

    db = database.session()
    try:
        counts = import_rows(db, rows)
        if dry_run:
            db.rollback()
        else:
            db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    finally:
        db.close()

    logger.info(
        "Catalog import from %s: %s inserted, %s updated, %s skipped%s",
        workbook_path.name,
        counts["inserted"],
        counts["updated"],
        counts["skipped"],
        " (dry run)" if dry_run else "",
    )
    return counts


__all__ = ["import_workbook", "load_sheet_rows", "normalize_header", "validate_columns"]
