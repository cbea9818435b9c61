"""Field mapping from upstream records to canonical records."""

from core.mapping.field_mapper import (
    FieldMappingError,
    map_invoice,
    map_invoice_line,
    map_payment,
    parse_number,
)

__all__ = [
    "FieldMappingError",
    "map_invoice",
    "map_invoice_line",
    "map_payment",
    "parse_number",
]
