"""inventory-lookup — Find where incoming stock is stored, straight from a spreadsheet."""

__version__ = "0.2.0"

FIELDS: list[str] = ["company", "product", "incoming_quantity", "expiry", "storage_bin"]
