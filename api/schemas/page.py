# api/schemas/page.py
from typing import Any, Dict, List, Optional
from .common import CamelModel


class BlockIn(CamelModel):
    id: Optional[str] = None
    type: Optional[str] = None
    view_type: Optional[str] = None
    order: Optional[int] = None
    data: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
    image_url: Optional[str] = None


class PageCreate(CamelModel):
    title: str
    slug: str
    blocks: List[BlockIn] = []


class PageUpdate(CamelModel):
    title: Optional[str] = None
    slug: Optional[str] = None


class BlocksRequest(CamelModel):
    page_id: Optional[str] = None
    blocks: List[BlockIn]
