# api/schemas/common.py
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request body that accepts both camelCase and snake_case keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PageResponse(BaseModel):
    items: List[Dict[str, Any]]
    page: int
    limit: int
    total: int

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str
    id: Optional[str] = None


class IdsRequest(CamelModel):
    ids: List[str]
    language: str = 'en'
    page: Optional[int] = None
