"""Base schema classes with camelCase alias generation.

Python code stays snake_case. JSON on the wire and in the catalog
snapshot is camelCase; dump with ``by_alias=True``.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for API payloads. Accepts and outputs camelCase."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class FrozenCamelModel(CamelModel):
    """Base for immutable records."""
    model_config = {"frozen": True}
