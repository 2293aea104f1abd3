"""Shared pydantic building blocks.

JSON on the wire is camelCase (invoiceNumber, postalCode, ...); Python side
stays snake_case. Both spellings are accepted on input.
"""
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from invoice_server.db.base import MAX_INTEGER

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# Foreign keys in payloads
RecordId = Annotated[int, Field(gt=0, le=MAX_INTEGER)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Optional text fields treat "" the same as absent."""
    if isinstance(value, str) and not value.strip():
        return None
    return value
