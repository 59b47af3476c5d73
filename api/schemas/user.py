# api/schemas/user.py
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict
from .common import CamelModel


class UserCreate(CamelModel):
    name: str
    email: str
    gender: Optional[str] = None
    profile_picture: Optional[str] = None
    dob: Optional[str] = None


class UserUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    profile_picture: Optional[str] = None
    dob: Optional[str] = None


class UserSchema(BaseModel):
    id: str
    name: str
    email: str
    gender: Optional[str] = None
    profile_picture: Optional[str] = None
    dob: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    preferences: Optional[Dict[str, Any]] = None
    progress: List[Dict[str, Any]] = []
    podcast_progress: List[Dict[str, Any]] = []
    bookmarks: List[Dict[str, Any]] = []

    model_config = ConfigDict(from_attributes=True)


class PreferencesIn(CamelModel):
    allow_reminders: Optional[bool] = None
    app_language: Optional[str] = None
    author_preferences: Optional[List[str]] = None
    category_preferences: Optional[List[str]] = None


class ProgressIn(CamelModel):
    book_id: Optional[str] = None
    completed: Optional[bool] = None
    last_chapter: Optional[int] = None


class PodcastProgressIn(CamelModel):
    completed: Optional[bool] = None
    last_position_seconds: Optional[int] = None
