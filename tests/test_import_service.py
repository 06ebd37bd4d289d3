from pathlib import Path
import tempfile
import unittest

from openpyxl import Workbook
from sqlalchemy import select

from textile_pos.database import init_database
from textile_pos.models.product import Product
from textile_pos.services.import_service import (
    build_product_values,
    import_workbook,
    load_sheet_rows,
    normalize_header,
    validate_columns,
)

HEADERS = ["Product Name", "Category", "Material", "UOM", "HSN Code", "GST Rate", "Price", "Stock", "SKU"]


def write_workbook(path, rows, headers=HEADERS):
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "Catalog"
    worksheet.append(headers)
    for row in rows:
        worksheet.append(row)
    workbook.save(path)


class ImportHelpersTest(unittest.TestCase):
    def test_header_aliases(self):
        self.assertEqual(normalize_header("Product Name"), "name")
        self.assertEqual(normalize_header("HSN Code"), "hsn_code")
        self.assertEqual(normalize_header("GST Rate"), "tax_rate")
        self.assertEqual(normalize_header("Min Stock Level"), "min_stock_level")
        self.assertEqual(normalize_header("Colour"), "color")
        self.assertEqual(normalize_header("Unknown Column"), "unknown_column")

    def test_validate_columns_reports_missing(self):
        with self.assertRaises(ValueError) as ctx:
            validate_columns({"name", "type", "price"})
        self.assertIn("hsn_code", str(ctx.exception))

    def test_build_product_values_normalizes_choices(self):
        values = build_product_values(
            {
                "name": " Cotton Yarn ",
                "type": "ready-made",
                "unit": "pcs",
                "hsn_code": 5205,
                "tax_rate": "12",
                "price": "1,250.50",
                "stock": 4,
                "sku": "YRN-1",
            }
        )
        self.assertEqual(values["name"], "Cotton Yarn")
        self.assertEqual(values["type"], "Ready Made")
        self.assertEqual(values["unit"], "Pcs")
        self.assertEqual(values["hsn_code"], "5205")
        self.assertEqual(values["price"], 1250.5)
        self.assertEqual(values["min_stock_level"], 0.0)

    def test_build_product_values_rejects_negative_price(self):
        with self.assertRaises(ValueError):
            build_product_values(
                {"name": "X", "type": "Fabric", "unit": "Meters", "hsn_code": "1", "tax_rate": 5,
                 "price": -1, "stock": 1, "sku": "X"}
            )

    def test_load_sheet_rows_skips_blank_rows(self):
        workbook = Workbook()
        worksheet = workbook.active
        worksheet.append(["Name", "SKU"])
        worksheet.append(["Silk", "S-1"])
        worksheet.append([None, None])
        worksheet.append(["Linen", "L-1"])

        rows, columns = load_sheet_rows(worksheet)

        self.assertEqual(columns, {"name", "sku"})
        self.assertEqual([row["sku"] for row in rows], ["S-1", "L-1"])


class ImportWorkbookTest(unittest.TestCase):
    def setUp(self):
        self.database = init_database("sqlite:///:memory:")
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "catalog.xlsx"

    def tearDown(self):
        self.tmp.cleanup()
        self.database.dispose()

    def skus(self):
        with self.database.session_scope() as db:
            return sorted(db.execute(select(Product.sku)).scalars().all())

    def test_inserts_updates_and_skips(self):
        with self.database.session_scope() as db:
            db.add(Product(name="Old Silk", type="Fabric", unit="Meters", hsn_code="5007",
                           tax_rate=5, price=50, stock=1, sku="SLK-1"))

        write_workbook(
            self.path,
            [
                ["Royal Silk", "Fabric", "Silk", "Meters", "5007", 5, 120, 30, "SLK-1"],
                ["Cotton Yarn", "Yarn", "Cotton", "Kg", "5205", 12, 80, 10, "YRN-1"],
                ["Cotton Yarn Copy", "Yarn", "Cotton", "Kg", "5205", 12, 80, 10, "YRN-1"],
                ["Bad Row", "Furniture", "", "Pcs", "9403", 18, 10, 1, "BAD-1"],
            ],
        )

        counts = import_workbook(self.database, self.path)

        self.assertEqual(counts["inserted"], 1)
        self.assertEqual(counts["updated"], 1)
        self.assertEqual(counts["skipped"], 2)
        self.assertEqual(len(counts["errors"]), 2)
        self.assertEqual(self.skus(), ["SLK-1", "YRN-1"])
        with self.database.session_scope() as db:
            silk = db.execute(select(Product).where(Product.sku == "SLK-1")).scalar_one()
            self.assertEqual(silk.name, "Royal Silk")
            self.assertEqual(silk.price, 120)

    def test_dry_run_saves_nothing(self):
        write_workbook(self.path, [["Royal Silk", "Fabric", "Silk", "Meters", "5007", 5, 120, 30, "SLK-1"]])

        counts = import_workbook(self.database, self.path, dry_run=True)

        self.assertEqual(counts["inserted"], 1)
        self.assertEqual(self.skus(), [])

    def test_missing_columns_rejected(self):
        write_workbook(self.path, [["Silk", 10]], headers=["Name", "Price"])
        with self.assertRaises(ValueError):
            import_workbook(self.database, self.path)

    def test_missing_file_rejected(self):
        with self.assertRaises(FileNotFoundError):
            import_workbook(self.database, Path(self.tmp.name) / "nope.xlsx")

    def test_unknown_sheet_rejected(self):
        write_workbook(self.path, [])
        with self.assertRaises(ValueError):
            import_workbook(self.database, self.path, sheet="Stock")


if __name__ == "__main__":
    unittest.main()
