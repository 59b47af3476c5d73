# api/routes/podcasts.py
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from api.dependencies import get_db, get_limits, get_storage, multipart_parts
from api.schemas.common import IdsRequest, MessageResponse, PageResponse
from api.uploads import PODCAST_COLLECTION_CONTRACT, PODCAST_CONTRACT, podcast_collection_input, podcast_input
from core.ingestion import IngestionLimits, Part, ingest
from core.sa.repositories import PodcastCollectionRepository, PodcastRepository
from core.storage import ObjectStorage

router = APIRouter(tags=["podcasts"])


@router.post("/podcasts", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def create_podcast(
    parts: List[Part] = Depends(multipart_parts),
    storage: ObjectStorage = Depends(get_storage),
    limits: IngestionLimits = Depends(get_limits),
    db: Session = Depends(get_db)
):
    canonical, translations = podcast_input(ingest(parts, PODCAST_CONTRACT, storage, limits))
    podcast = PodcastRepository(db).create(canonical, translations)
    return MessageResponse(message="Podcast created successfully", id=podcast.id)


@router.get("/podcasts", response_model=PageResponse)
def get_podcasts(page: str = Query(None), language: str = Query("en"), db: Session = Depends(get_db)):
    return PodcastRepository(db).list(page, language).to_dict()


@router.get("/podcasts/search", response_model=PageResponse)
def search_podcasts(
    query: str = Query(""),
    language: str = Query("en"),
    page: str = Query(None),
    db: Session = Depends(get_db)
):
    return PodcastRepository(db).search(query, language, page).to_dict()


@router.post("/podcasts/by-ids")
def get_podcasts_by_ids(body: IdsRequest, db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    return PodcastRepository(db).get_many_by_ids(body.ids, body.language)


@router.post("/podcasts-by-category-ids", response_model=PageResponse)
def get_podcasts_by_category_ids(body: IdsRequest, db: Session = Depends(get_db)):
    return PodcastRepository(db).get_by_category_ids(body.ids, body.language, body.page).to_dict()


@router.get("/podcasts-by-category-slug/{slug}", response_model=PageResponse)
def get_podcasts_by_category_slug(
    slug: str,
    language: str = Query("en"),
    page: str = Query(None),
    db: Session = Depends(get_db)
):
    return PodcastRepository(db).get_by_category_slug(slug, language, page).to_dict()


@router.get("/podcasts/{podcast_id}")
def get_podcast(podcast_id: str, language: str = Query("en"), db: Session = Depends(get_db)) -> Dict[str, Any]:
    return PodcastRepository(db).get_by_id(podcast_id, language)


@router.get("/podcasts/{podcast_id}/summary")
def get_podcast_summary(podcast_id: str, language: str = Query("en"), db: Session = Depends(get_db)) -> Dict[str, Any]:
    return PodcastRepository(db).get_summary(podcast_id, language)


@router.api_route("/podcasts/{podcast_id}", methods=["PUT", "PATCH"])
def update_podcast(
    podcast_id: str,
    parts: List[Part] = Depends(multipart_parts),
    storage: ObjectStorage = Depends(get_storage),
    limits: IngestionLimits = Depends(get_limits),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    canonical, translations = podcast_input(ingest(parts, PODCAST_CONTRACT, storage, limits))
    repo = PodcastRepository(db)
    podcast = repo.update(podcast_id, canonical, translations)
    return repo.to_all_languages(podcast)


@router.delete("/podcasts/{podcast_id}", response_model=MessageResponse)
def delete_podcast(podcast_id: str, db: Session = Depends(get_db)):
    PodcastRepository(db).delete_by_id(podcast_id)
    return MessageResponse(message="Podcast deleted successfully")


# Podcast collections

@router.post("/podcast-collections", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def create_podcast_collection(
    parts: List[Part] = Depends(multipart_parts),
    storage: ObjectStorage = Depends(get_storage),
    limits: IngestionLimits = Depends(get_limits),
    db: Session = Depends(get_db)
):
    canonical, translations = podcast_collection_input(ingest(parts, PODCAST_COLLECTION_CONTRACT, storage, limits))
    collection = PodcastCollectionRepository(db).create(canonical, translations)
    return MessageResponse(message="Podcast collection created successfully", id=collection.id)


@router.get("/podcast-collections", response_model=PageResponse)
def get_podcast_collections(page: str = Query(None), language: str = Query("en"), db: Session = Depends(get_db)):
    return PodcastCollectionRepository(db).list(page, language).to_dict()


@router.post("/podcast-collections/by-ids")
def get_podcast_collections_by_ids(body: IdsRequest, db: Session = Depends(get_db)) -> List[Dict[str, Any]]:
    return PodcastCollectionRepository(db).get_many_by_ids(body.ids, body.language)


@router.get("/podcast-collections/{collection_id}")
def get_podcast_collection(
    collection_id: str,
    language: str = Query("en"),
    include_podcasts: bool = Query(True, alias="includePodcasts"),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    repo = PodcastCollectionRepository(db)
    if include_podcasts:
        return repo.get_with_podcasts(collection_id, language)
    return repo.get_by_id(collection_id, language)


@router.patch("/podcast-collections/{collection_id}")
def update_podcast_collection(
    collection_id: str,
    parts: List[Part] = Depends(multipart_parts),
    storage: ObjectStorage = Depends(get_storage),
    limits: IngestionLimits = Depends(get_limits),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    canonical, translations = podcast_collection_input(ingest(parts, PODCAST_COLLECTION_CONTRACT, storage, limits))
    repo = PodcastCollectionRepository(db)
    collection = repo.update(collection_id, canonical, translations)
    return repo.to_all_languages(collection)


@router.delete("/podcast-collections/{collection_id}", response_model=MessageResponse)
def delete_podcast_collection(collection_id: str, db: Session = Depends(get_db)):
    PodcastCollectionRepository(db).delete_by_id(collection_id)
    return MessageResponse(message="Podcast collection deleted successfully")
