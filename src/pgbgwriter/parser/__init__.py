"""Item key parsing and the field catalog."""

from pgbgwriter.parser.keys import parse_key
from pgbgwriter.parser.loader import FieldCatalog

__all__ = ["FieldCatalog", "parse_key"]
