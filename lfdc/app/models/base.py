"""
Base model for backend payloads.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class BackendModel(BaseModel):
    """Mirror of a backend document: camelCase on the wire, unknown fields ignored."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "ignore"

    def to_payload(self) -> dict:
        """Serializes back to the backend's camelCase shape."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
