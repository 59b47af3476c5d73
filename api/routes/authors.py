# api/routes/authors.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from api.dependencies import get_db, get_limits, get_storage, multipart_parts
from api.schemas.common import IdsRequest, MessageResponse, PageResponse
from api.uploads import AUTHOR_CONTRACT, author_input
from core.ingestion import IngestionLimits, Part, ingest
from core.sa.repositories import AuthorRepository
from core.storage import ObjectStorage

router = APIRouter(prefix="/authors", tags=["authors"])


@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def create_author(
    parts: List[Part] = Depends(multipart_parts),
    storage: ObjectStorage = Depends(get_storage),
    limits: IngestionLimits = Depends(get_limits),
    db: Session = Depends(get_db)
):
    """Create an author from a multipart form with per-language JSON objects and an image"""
    canonical, translations = author_input(ingest(parts, AUTHOR_CONTRACT, storage, limits))
    author = AuthorRepository(db).create(canonical, translations)
    return MessageResponse(message="Author created successfully", id=author.id)


@router.get("", response_model=PageResponse)
def get_authors(page: str = Query(None), language: str = Query("en"), db: Session = Depends(get_db)):
    return AuthorRepository(db).list(page, language).to_dict()


@router.get("/search")
def search_authors(
    query: str = Query("", description="Substring of the author name"),
    language: str = Query("en"),
    db: Session = Depends(get_db)
) -> List[Dict[str, Any]]:
    return AuthorRepository(db).search(query, language)


@router.post("/by-ids")
def get_authors_by_ids(body: IdsRequest, db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    return AuthorRepository(db).get_many_by_ids(body.ids, body.language)


@router.get("/{author_id}")
def get_author(author_id: str, language: str = Query("en"), db: Session = Depends(get_db)) -> Dict[str, Any]:
    return AuthorRepository(db).get_by_id(author_id, language)


@router.patch("/{author_id}")
def update_author(
    author_id: str,
    parts: List[Part] = Depends(multipart_parts),
    storage: ObjectStorage = Depends(get_storage),
    limits: IngestionLimits = Depends(get_limits),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    canonical, translations = author_input(ingest(parts, AUTHOR_CONTRACT, storage, limits))
    repo = AuthorRepository(db)
    author = repo.update(author_id, canonical, translations)
    return repo.to_all_languages(author)


@router.delete("/{author_id}", response_model=MessageResponse)
def delete_author(author_id: str, db: Session = Depends(get_db)):
    AuthorRepository(db).delete_by_id(author_id)
    return MessageResponse(message="Author deleted successfully")
