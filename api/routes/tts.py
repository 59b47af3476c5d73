# api/routes/tts.py
from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.dependencies import get_db
from api.schemas.content import SaveTTSRequest
from core.errors import ValidationError
from core.sa.repositories import SummaryRepository

router = APIRouter(tags=["tts"])


@router.post("/save-tts")
def save_tts(body: SaveTTSRequest, db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Store the audio URL produced for a summary translation"""
    if body.type != 'summary':
        raise ValidationError(f"Unsupported TTS type '{body.type}'")
    translation = SummaryRepository(db).save_audio(body.summary_id, body.language, body.audio_url)
    return {"message": "TTS saved successfully", "translation": translation}
