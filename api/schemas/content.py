# api/schemas/content.py
from typing import List, Optional
from .common import CamelModel


class SummaryFields(CamelModel):
    title: Optional[str] = None
    order: Optional[int] = None


class TranslatedSummaryFields(CamelModel):
    language: str
    title: Optional[str] = None
    content: Optional[str] = None
    key_takeaways: Optional[List[str]] = None
    audio_url: Optional[str] = None


class SummaryRequest(CamelModel):
    summary: SummaryFields
    translated_summary: List[TranslatedSummaryFields] = []


class FreeBookEntry(CamelModel):
    book_id: str
    order: int = 0


class FreeBooksRequest(CamelModel):
    books: List[FreeBookEntry]


class SaveTTSRequest(CamelModel):
    summary_id: str
    audio_url: str
    language: str
    type: str = 'summary'
