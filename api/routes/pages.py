# api/routes/pages.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from api.dependencies import get_db
from api.schemas.common import MessageResponse
from api.schemas.page import BlocksRequest, PageCreate, PageUpdate
from core.errors import ValidationError
from core.sa.repositories import PageRepository

router = APIRouter(prefix="/pages", tags=["pages"])


def _blocks(body) -> List[Dict[str, Any]]:
    return [block.model_dump(exclude_none=True) for block in body.blocks]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_page(body: PageCreate, db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Create a page, with its blocks when any are given"""
    return PageRepository(db).create_page_with_blocks(body.title, body.slug, _blocks(body))


@router.get("")
def get_pages(db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    return PageRepository(db).list_pages()


@router.post("/collections", status_code=status.HTTP_201_CREATED)
def add_page_blocks(body: BlocksRequest, db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    if not body.page_id:
        raise ValidationError("page_id is required")
    return PageRepository(db).add_blocks(body.page_id, _blocks(body))


@router.put("/collections")
def update_page_blocks(body: BlocksRequest, db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    return PageRepository(db).update_blocks(_blocks(body))


@router.get("/{slug}")
def get_page(slug: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    return PageRepository(db).get_by_slug(slug)


@router.patch("/{page_id}")
def update_page(page_id: str, body: PageUpdate, db: Session = Depends(get_db)) -> Dict[str, Any]:
    return PageRepository(db).update_page(page_id, body.title, body.slug)


@router.delete("/{page_id}", response_model=MessageResponse)
def delete_page(page_id: str, db: Session = Depends(get_db)):
    PageRepository(db).delete_page(page_id)
    return MessageResponse(message="Page deleted successfully")
