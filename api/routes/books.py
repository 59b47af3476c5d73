# api/routes/books.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from api.dependencies import get_db, get_limits, get_storage, multipart_parts
from api.schemas.common import IdsRequest, MessageResponse, PageResponse
from api.schemas.content import FreeBooksRequest, SummaryRequest
from api.uploads import BOOK_COLLECTION_CONTRACT, BOOK_CONTRACT, book_collection_input, book_input
from core.ingestion import IngestionLimits, Part, ingest
from core.sa.repositories import BookCollectionRepository, BookRepository, SummaryRepository
from core.storage import ObjectStorage

router = APIRouter(tags=["books"])


def _summary_payload(body: SummaryRequest):
    canonical = body.summary.model_dump(exclude_none=True)
    translations = [entry.model_dump(exclude_none=True) for entry in body.translated_summary]
    return canonical, translations


# Books

@router.post("/books", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def create_book(
    parts: List[Part] = Depends(multipart_parts),
    storage: ObjectStorage = Depends(get_storage),
    limits: IngestionLimits = Depends(get_limits),
    db: Session = Depends(get_db)
):
    """
    Create a book from a multipart form.

    Text fields: ``slug``, ``totalDuration``, ``authors`` and ``categories``
    (JSON id arrays) and one JSON object per language (``english``,
    ``hindi``, ``arabic``, ``bahasa``). Files: ``image<Language>`` covers,
    ``audioFile<Language>`` and ``summaryAudio_<lang>_<n>``.
    """
    canonical, translations = book_input(ingest(parts, BOOK_CONTRACT, storage, limits))
    book = BookRepository(db).create(canonical, translations)
    return MessageResponse(message="Book created successfully", id=book.id)


@router.get("/books", response_model=PageResponse)
def get_books(page: str = Query(None), language: str = Query("en"), db: Session = Depends(get_db)):
    return BookRepository(db).list(page, language).to_dict()


@router.get("/books/search", response_model=PageResponse)
def search_books(
    query: str = Query("", description="Substring of the book title"),
    language: str = Query("en"),
    page: str = Query(None),
    db: Session = Depends(get_db)
):
    return BookRepository(db).search(query, language, page).to_dict()


@router.get("/books/free")
def get_free_books(language: str = Query("en"), db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    return BookRepository(db).list_free_books(language)


@router.post("/books/free", status_code=status.HTTP_201_CREATED)
def add_free_books(body: FreeBooksRequest, db: Session = Depends(get_db)) -> Dict[str, Any]:
    added = BookRepository(db).add_free_books([entry.model_dump() for entry in body.books])
    return {"message": "Free books created successfully", "added": added}


@router.delete("/books/free/{book_id}", response_model=MessageResponse)
def remove_free_book(book_id: str, db: Session = Depends(get_db)):
    BookRepository(db).remove_free_book(book_id)
    return MessageResponse(message="Free book deleted successfully")


@router.post("/books/by-category-ids", response_model=PageResponse)
def get_books_by_category_ids(body: IdsRequest, db: Session = Depends(get_db)):
    return BookRepository(db).get_by_category_ids(body.ids, body.language, body.page).to_dict()


@router.post("/books/by-author-ids", response_model=PageResponse)
def get_books_by_author_ids(body: IdsRequest, db: Session = Depends(get_db)):
    return BookRepository(db).get_by_author_ids(body.ids, body.language, body.page).to_dict()


@router.get("/books/slug/{slug}")
def get_book_by_slug(slug: str, language: str = Query("en"), db: Session = Depends(get_db)) -> Dict[str, Any]:
    return BookRepository(db).get_by_slug(slug, language)


@router.get("/books/{book_id}")
def get_book(book_id: str, language: str = Query("en"), db: Session = Depends(get_db)) -> Dict[str, Any]:
    return BookRepository(db).get_by_id(book_id, language)


@router.put("/books/{book_id}")
def update_book(
    book_id: str,
    parts: List[Part] = Depends(multipart_parts),
    storage: ObjectStorage = Depends(get_storage),
    limits: IngestionLimits = Depends(get_limits),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    """Patch a book. Only the languages present in the form are touched."""
    canonical, translations = book_input(ingest(parts, BOOK_CONTRACT, storage, limits))
    repo = BookRepository(db)
    book = repo.update(book_id, canonical, translations)
    return {"message": "Book updated successfully", "book": repo.to_all_languages(book)}


@router.delete("/books/{book_id}", response_model=MessageResponse)
def delete_book(book_id: str, db: Session = Depends(get_db)):
    BookRepository(db).delete_by_id(book_id)
    return MessageResponse(message="Book deleted successfully")


# Reverse lookups

@router.get("/authors/{author_id}/books", response_model=PageResponse)
def get_books_by_author(
    author_id: str,
    language: str = Query("en"),
    page: str = Query(None),
    db: Session = Depends(get_db)
):
    return BookRepository(db).get_by_author(author_id, language, page).to_dict()


@router.get("/categories/{slug}/books", response_model=PageResponse)
def get_books_by_category_slug(
    slug: str,
    language: str = Query("en"),
    page: str = Query(None),
    db: Session = Depends(get_db)
):
    return BookRepository(db).get_by_category_slug(slug, language, page).to_dict()


# Summaries

@router.post("/books/{book_id}/summary", status_code=status.HTTP_201_CREATED)
def create_summary(book_id: str, body: SummaryRequest, db: Session = Depends(get_db)) -> Dict[str, Any]:
    canonical, translations = _summary_payload(body)
    repo = SummaryRepository(db)
    summary = repo.create_for_book(book_id, canonical, translations)
    return repo.to_all_languages(summary)


@router.put("/books/{book_id}/summary/{summary_id}")
def update_summary(book_id: str, summary_id: str, body: SummaryRequest, db: Session = Depends(get_db)) -> Dict[str, Any]:
    canonical, translations = _summary_payload(body)
    repo = SummaryRepository(db)
    summary = repo.update_for_book(book_id, summary_id, canonical, translations)
    return repo.to_all_languages(summary)


@router.get("/books/{book_id}/summaries")
def get_summaries(book_id: str, language: str = Query("en"), db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    return SummaryRepository(db).list_for_book(book_id, language)


@router.delete("/books/{book_id}/summaries/{summary_id}", response_model=MessageResponse)
def delete_summary(book_id: str, summary_id: str, db: Session = Depends(get_db)):
    SummaryRepository(db).delete_for_book(book_id, summary_id)
    return MessageResponse(message="Summary deleted successfully")


# Book collections

@router.post("/book-collections", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def create_book_collection(
    parts: List[Part] = Depends(multipart_parts),
    storage: ObjectStorage = Depends(get_storage),
    limits: IngestionLimits = Depends(get_limits),
    db: Session = Depends(get_db)
):
    canonical, translations = book_collection_input(ingest(parts, BOOK_COLLECTION_CONTRACT, storage, limits))
    collection = BookCollectionRepository(db).create(canonical, translations)
    return MessageResponse(message="Book collection created successfully", id=collection.id)


@router.get("/book-collections", response_model=PageResponse)
def get_book_collections(page: str = Query(None), language: str = Query("en"), db: Session = Depends(get_db)):
    return BookCollectionRepository(db).list(page, language).to_dict()


@router.post("/book-collections/by-ids")
def get_book_collections_by_ids(body: IdsRequest, db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    return BookCollectionRepository(db).get_many_by_ids(body.ids, body.language)


@router.get("/book-collections/{collection_id}")
def get_book_collection(
    collection_id: str,
    language: str = Query("en"),
    include_books: bool = Query(True, alias="includeBooks"),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    repo = BookCollectionRepository(db)
    if include_books:
        return repo.get_with_books(collection_id, language)
    return repo.get_by_id(collection_id, language)


@router.patch("/book-collections/{collection_id}")
def update_book_collection(
    collection_id: str,
    parts: List[Part] = Depends(multipart_parts),
    storage: ObjectStorage = Depends(get_storage),
    limits: IngestionLimits = Depends(get_limits),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    canonical, translations = book_collection_input(ingest(parts, BOOK_COLLECTION_CONTRACT, storage, limits))
    repo = BookCollectionRepository(db)
    collection = repo.update(collection_id, canonical, translations)
    return repo.to_all_languages(collection)


@router.delete("/book-collections/{collection_id}", response_model=MessageResponse)
def delete_book_collection(collection_id: str, db: Session = Depends(get_db)):
    BookCollectionRepository(db).delete_by_id(collection_id)
    return MessageResponse(message="Book collection deleted successfully")
