"""Shared schema base: camelCase on the wire, snake_case in Python."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore",
    )

    def to_document(self, *, exclude_unset: bool = False) -> dict:
        """Dump as a store document (camelCase keys, JSON-safe values)."""
        return self.model_dump(
            mode="json", by_alias=True, exclude_unset=exclude_unset,
        )
