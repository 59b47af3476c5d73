# api/routes/users.py
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from api.dependencies import current_identity, get_db
from api.schemas.common import MessageResponse, PageResponse
from api.schemas.user import PodcastProgressIn, PreferencesIn, ProgressIn, UserCreate, UserSchema, UserUpdate
from core.auth import Identity
from core.errors import PermissionDeniedError, ValidationError
from core.sa.repositories import UserRepository

router = APIRouter(prefix="/users", tags=["users"])


def _values(body) -> Dict[str, Any]:
    return body.model_dump(exclude_none=True)


@router.post("", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreate, identity: Identity = Depends(current_identity), db: Session = Depends(get_db)):
    """Register the authenticated subject as a user"""
    return UserRepository(db).create_user(identity.subject_id, _values(body))


@router.get("", response_model=PageResponse)
def get_users(page: str = Query(None), identity: Identity = Depends(current_identity), db: Session = Depends(get_db)):
    return UserRepository(db).list_users(page).to_dict()


@router.get("/me", response_model=UserSchema)
def get_me(identity: Identity = Depends(current_identity), db: Session = Depends(get_db)):
    return UserRepository(db).get_user(identity.subject_id)


@router.patch("", response_model=UserSchema)
def update_me(body: UserUpdate, identity: Identity = Depends(current_identity), db: Session = Depends(get_db)):
    return UserRepository(db).update_user(identity.subject_id, _values(body))


@router.get("/email/{email}", response_model=UserSchema)
def get_user_by_email(email: str, identity: Identity = Depends(current_identity), db: Session = Depends(get_db)):
    return UserRepository(db).get_by_email(email)


# Preferences

@router.post("/preferences", status_code=status.HTTP_201_CREATED)
def create_preferences(body: PreferencesIn, identity: Identity = Depends(current_identity), db: Session = Depends(get_db)) -> Dict[str, Any]:
    return UserRepository(db).create_preferences(identity.subject_id, _values(body))


@router.patch("/preferences")
def update_preferences(body: PreferencesIn, identity: Identity = Depends(current_identity), db: Session = Depends(get_db)) -> Dict[str, Any]:
    return UserRepository(db).update_preferences(identity.subject_id, _values(body))


# Progress

@router.post("/progress", status_code=status.HTTP_201_CREATED)
def create_progress(body: ProgressIn, identity: Identity = Depends(current_identity), db: Session = Depends(get_db)) -> Dict[str, Any]:
    if not body.book_id:
        raise ValidationError("book_id is required")
    values = _values(body)
    values.pop('book_id')
    return UserRepository(db).create_progress(identity.subject_id, body.book_id, values)


@router.patch("/progress/{book_id}")
def update_progress(book_id: str, body: ProgressIn, identity: Identity = Depends(current_identity), db: Session = Depends(get_db)) -> Dict[str, Any]:
    values = _values(body)
    values.pop('book_id', None)
    return UserRepository(db).update_progress(identity.subject_id, book_id, values)


@router.put("/podcast-progress/{podcast_id}")
def save_podcast_progress(
    podcast_id: str,
    body: PodcastProgressIn,
    identity: Identity = Depends(current_identity),
    db: Session = Depends(get_db)
) -> Dict[str, Any]:
    return UserRepository(db).save_podcast_progress(identity.subject_id, podcast_id, _values(body))


# Bookmarks

@router.get("/bookmarks", response_model=PageResponse)
def get_bookmarks(page: str = Query(None), identity: Identity = Depends(current_identity), db: Session = Depends(get_db)):
    return UserRepository(db).list_bookmarks(identity.subject_id, page).to_dict()


@router.post("/bookmarks/{book_id}", status_code=status.HTTP_201_CREATED)
def create_bookmark(book_id: str, identity: Identity = Depends(current_identity), db: Session = Depends(get_db)) -> Dict[str, Any]:
    return UserRepository(db).create_bookmark(identity.subject_id, book_id)


@router.delete("/bookmarks/{book_id}", response_model=MessageResponse)
def delete_bookmark(book_id: str, identity: Identity = Depends(current_identity), db: Session = Depends(get_db)):
    UserRepository(db).delete_bookmark(identity.subject_id, book_id)
    return MessageResponse(message="Bookmark deleted successfully")


@router.get("/{user_id}", response_model=UserSchema)
def get_user(user_id: str, identity: Identity = Depends(current_identity), db: Session = Depends(get_db)):
    return UserRepository(db).get_user(user_id)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(user_id: str, identity: Identity = Depends(current_identity), db: Session = Depends(get_db)):
    """Delete the caller's account together with everything it owns"""
    if user_id != identity.subject_id:
        raise PermissionDeniedError("You can only delete your own account")
    UserRepository(db).delete_user(user_id)
    return MessageResponse(message="User deleted successfully")
