"""Shared schema configuration and response envelope"""

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel
from typing import Annotated, Any, Dict, Optional
from decimal import Decimal

# Prices go over the wire as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class BaseSchema(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def dump(value: Any) -> Any:
    """Serialize schemas (or lists of them) with their wire aliases"""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, list):
        return [dump(item) for item in value]
    return value


def success_response(data: Any, meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Success envelope shared by every route"""
    body: Dict[str, Any] = {"success": True, "data": dump(data)}
    if meta is not None:
        body["meta"] = meta
    return body
