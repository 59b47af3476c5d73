# api/routes/categories.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from api.dependencies import get_db, get_limits, get_storage, multipart_parts
from api.schemas.common import IdsRequest, MessageResponse, PageResponse
from api.uploads import CATEGORY_CONTRACT, category_input
from core.ingestion import IngestionLimits, Part, ingest
from core.sa.repositories import CategoryRepository
from core.storage import ObjectStorage

router = APIRouter(prefix="/categories", tags=["categories"])


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    parts: List[Part] = Depends(multipart_parts),
    storage: ObjectStorage = Depends(get_storage),
    limits: IngestionLimits = Depends(get_limits),
    db: Session = Depends(get_db)
):
    """
    Create a category.

    The form must carry a ``categorySVG`` file ending in ``.svg`` and a
    ``categoryImage``; ``midImage`` is optional.
    """
    canonical, translations = category_input(ingest(parts, CATEGORY_CONTRACT, storage, limits))
    category = CategoryRepository(db).create(canonical, translations)
    return MessageResponse(message="Category created successfully", id=category.id)


@router.get("", response_model=PageResponse)
def get_categories(page: str = Query(None), language: str = Query("en"), db: Session = Depends(get_db)):
    return CategoryRepository(db).list(page, language).to_dict()


@router.get("/search")
def search_categories(query: str = Query(""), language: str = Query("en"), db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    return CategoryRepository(db).search(query, language)


@router.post("/by-ids")
def get_categories_by_ids(body: IdsRequest, db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    return CategoryRepository(db).get_many_by_ids(body.ids, body.language)


@router.get("/slug/{slug}")
def get_category_by_slug(slug: str, language: str = Query("en"), db: Session = Depends(get_db)) -> Dict[str, Any]:
    return CategoryRepository(db).get_by_slug(slug, language)


@router.get("/{category_id}")
def get_category(category_id: str, language: str = Query("en"), db: Session = Depends(get_db)) -> Dict[str, Any]:
    return CategoryRepository(db).get_by_id(category_id, language)


@router.patch("/{category_id}")
def update_category(
    category_id: str,
    parts: List[Part] = Depends(multipart_parts),
    storage: ObjectStorage = Depends(get_storage),
    limits: IngestionLimits = Depends(get_limits),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    canonical, translations = category_input(ingest(parts, CATEGORY_CONTRACT, storage, limits))
    repo = CategoryRepository(db)
    category = repo.update(category_id, canonical, translations)
    return repo.to_all_languages(category)


@router.delete("/{category_id}", response_model=MessageResponse)
def delete_category(category_id: str, db: Session = Depends(get_db)):
    CategoryRepository(db).delete_by_id(category_id)
    return MessageResponse(message="Category deleted successfully")
