# api/dependencies.py
from typing import Iterator, List, Optional

from fastapi import Header, Request
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from core.auth import Identity
from core.errors import AuthenticationError, PayloadTooLargeError, ValidationError
from core.ingestion import FilePart, IngestionLimits, Part, ValuePart, format_size
from core.storage import ObjectStorage


def get_db(request: Request) -> Iterator[Session]:
    """One session per request, closed when the response is sent"""
    session = request.app.state.database.get_session()
    try:
        yield session
    finally:
        session.close()


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage


def get_limits(request: Request) -> IngestionLimits:
    return request.app.state.limits


def current_identity(request: Request, authorization: Optional[str] = Header(None)) -> Identity:
    """Verify the ``Authorization: Bearer <token>`` header"""
    if not authorization or not authorization.lower().startswith('bearer '):
        raise AuthenticationError("Unauthorized")
    token = authorization.split(' ', 1)[1].strip()
    return request.app.state.verifier.verify(token)


async def multipart_parts(request: Request) -> List[Part]:
    """Buffer the multipart body and convert it into framework-neutral parts"""
    if not request.headers.get('content-type', '').startswith('multipart/form-data'):
        raise ValidationError("Expected a multipart/form-data body")
    limits: IngestionLimits = request.app.state.limits
    length = request.headers.get('content-length')
    if length and length.isdigit() and int(length) > limits.max_request_bytes:
        raise PayloadTooLargeError(
            f"Request too large. Maximum request size is {format_size(limits.max_request_bytes)}."
        )
    form = await request.form()
    parts: List[Part] = []
    for name, value in form.multi_items():
        if isinstance(value, UploadFile):
            parts.append(FilePart(name=name, filename=value.filename or '', content_type=value.content_type, stream=value.file))
        else:
            parts.append(ValuePart(name=name, value=value))
    return parts
