"""YAML field catalog for pgbgwriter.

the catalog is the list of known pg_stat_bgwriter columns and derived keys.
it drives the cli listings and the PostgreSQL 17 column remapping. it is
NOT used to reject field names - unknown columns go straight to the server
and fail there.
"""

from importlib.resources import files

import yaml

from pgbgwriter.models.metric import FieldDefinition, KeyDefinition

DEFAULT_CATALOG = "bgwriter.yaml"


class FieldCatalog:
    """Known fields and keys, loaded from yaml."""

    def __init__(self) -> None:
        self.fields: dict[str, FieldDefinition] = {}
        self.keys: dict[str, KeyDefinition] = {}

    @classmethod
    def load_default(cls) -> "FieldCatalog":
        """Load the catalog shipped inside the package."""
        catalog = cls()
        resource = files("pgbgwriter.catalog").joinpath(DEFAULT_CATALOG)
        catalog.load_text(resource.read_text(encoding="utf-8"))
        return catalog

    def load_text(self, text: str) -> None:
        """Parse catalog yaml. empty documents are ignored."""
        data = yaml.safe_load(text)
        if data is None:
            return

        for field_data in data.get("fields", []):
            field = FieldDefinition.model_validate(field_data)
            if field.name in self.fields:
                raise ValueError(f"Duplicate field: {field.name}")
            self.fields[field.name] = field

        for key_data in data.get("keys", []):
            key = KeyDefinition.model_validate(key_data)
            if key.key in self.keys:
                raise ValueError(f"Duplicate key: {key.key}")
            self.keys[key.key] = key

    def checkpointer_columns(self) -> dict[str, str]:
        """Map of legacy field name -> pg_stat_checkpointer column."""
        return {
            f.name: f.checkpointer_column
            for f in self.fields.values()
            if f.checkpointer_column
        }

    def available_fields(self, server_version_num: int | None = None) -> list[FieldDefinition]:
        """Fields that exist on the given server version (all if unknown)."""
        if server_version_num is None:
            return list(self.fields.values())
        return [
            f
            for f in self.fields.values()
            if f.removed_in is None or server_version_num < f.removed_in
        ]
