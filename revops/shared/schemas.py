"""Shared pydantic helpers for camelCase API payloads over snake_case columns"""

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def to_column_values(data: BaseModel, exclude: Optional[set[str]] = None) -> dict[str, Any]:
    """
    Dump a camelCase create schema into ORM column keyword arguments.

    Unset and null fields are dropped so column defaults apply.
    """
    dumped = data.model_dump(exclude_unset=True, exclude_none=True, exclude=exclude)
    return {camel_to_snake(k): v for k, v in dumped.items()}


def to_update_values(data: BaseModel, model, exclude: Optional[set[str]] = None) -> dict[str, Any]:
    """
    Dump a PATCH schema into column updates for ``model``.

    Only fields sent by the client are included. An explicit null clears a
    nullable column; nulls for NOT NULL or defaulted columns are ignored.
    """
    columns = model.__table__.columns
    values = {}
    for key, value in data.model_dump(exclude_unset=True, exclude=exclude).items():
        column = camel_to_snake(key)
        if value is None and column in columns:
            if not columns[column].nullable or columns[column].default is not None:
                continue
        values[column] = value
    return values


class CamelModel(BaseModel):
    """Response schema read from ORM objects and serialized with camelCase keys"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


def success_response(
    data: Any = None, meta: Optional[dict] = None, message: Optional[str] = None
) -> dict[str, Any]:
    """Standard ``{success, data, meta?, message?}`` envelope"""
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if meta is not None:
        body["meta"] = meta
    if message is not None:
        body["message"] = message
    return body
