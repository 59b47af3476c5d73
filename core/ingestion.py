# core/ingestion.py
"""Turn multipart form parts into metadata plus stored-file URLs.

The adapter knows nothing about the web framework. The request boundary hands
it a sequence of ``ValuePart`` and ``FilePart`` objects, an entity's
``MultipartContract`` and a storage capability, and gets back an
``IngestedUpload``.
"""
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, BinaryIO, Callable, Dict, Iterable, List, Optional, Tuple, Union
import json
import logging
import mimetypes
import os
import re

from PIL import Image, UnidentifiedImageError

from core.errors import PayloadTooLargeError, StorageNotConfiguredError, ValidationError
from core.sa.models import LANGUAGE_KEYS
from core.storage import ObjectStorage

logger = logging.getLogger(__name__)

MB = 1024 * 1024
CHUNK_SIZE = 64 * 1024
OCTET_STREAM = 'application/octet-stream'


@dataclass
class ValuePart:
    name: str
    value: str


@dataclass
class FilePart:
    name: str
    filename: str
    content_type: Optional[str]
    stream: BinaryIO


Part = Union[ValuePart, FilePart]


@dataclass
class IngestionLimits:
    max_file_bytes: int = 100 * MB
    max_request_bytes: int = 200 * MB
    max_files: int = 10

    @classmethod
    def from_env(cls) -> 'IngestionLimits':
        return cls(
            max_file_bytes=int(float(os.getenv('MAX_FILE_SIZE_MB', '100')) * MB),
            max_request_bytes=int(float(os.getenv('MAX_REQUEST_SIZE_MB', '200')) * MB),
            max_files=int(os.getenv('MAX_UPLOAD_FILES', '10')),
        )


def format_size(num_bytes: int) -> str:
    if num_bytes >= MB:
        return f"{num_bytes // MB}MB"
    return f"{max(num_bytes // 1024, 1)}KB"


@dataclass
class IngestedUpload:
    metadata: Dict[str, Any] = field(default_factory=dict)
    files: Dict[str, str] = field(default_factory=dict)


# Field parsers

def parse_json(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return json.loads(value)


def parse_text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def parse_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("boolean is not an integer")
    if isinstance(value, int):
        return value
    number = float(str(value).strip())
    if not number.is_integer():
        raise ValueError(f"{value!r} is not an integer")
    return int(number)


def parse_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ('true', '1', 'yes', 'on'):
        return True
    if text in ('false', '0', 'no', 'off', ''):
        return False
    raise ValueError(f"{value!r} is not a boolean")


def parse_id_list(value: Any) -> List[str]:
    """JSON array of ids, or a comma separated string"""
    if isinstance(value, str):
        text = value.strip()
        if text.startswith('['):
            value = json.loads(text)
        else:
            value = [item.strip() for item in text.split(',') if item.strip()]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError("expected a list of ids")
    return value


def sniff_json(value: str) -> Any:
    """Parse values that look like a JSON object or array, else keep the string.

    Only applied to fields a contract does not declare.
    """
    if not isinstance(value, str):
        return value
    trimmed = value.strip()
    if (trimmed.startswith('{') and trimmed.endswith('}')) or (trimmed.startswith('[') and trimmed.endswith(']')):
        try:
            return json.loads(trimmed)
        except ValueError:
            return value
    return value


@dataclass
class MultipartContract:
    """Declared text fields of one entity's upload form and its default folder"""
    fields: Dict[str, Callable[[Any], Any]] = field(default_factory=dict)
    default_folder: str = 'uploads'

    def parse_value(self, name: str, value: str) -> Any:
        parser = self.fields.get(name)
        if parser is None:
            return sniff_json(value)
        try:
            return parser(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid value for field '{name}'")


# Folder routing: first matching pattern wins
FOLDER_ROUTES: List[Tuple[re.Pattern, str]] = [
    (re.compile(r'^summaryAudio_(?P<lang>[A-Za-z]+)_(?P<index>\d+)$'), 'uploads/summary-audio/{lang}/{index}'),
    (re.compile(r'^audioFile(?P<lang>[A-Za-z]+)$'), 'uploads/book-audio/{lang}'),
    (re.compile(r'^image(?P<lang>[A-Za-z]+)$'), 'uploads/book-images/{lang}'),
    (re.compile(r'^(coverUrl|[A-Za-z]+_coverImage)$'), 'uploads/book-covers'),
    (re.compile(r'^collectionImage$'), 'uploads/collection-covers'),
    (re.compile(r'^categorySVG$'), 'uploads/category-svg'),
    (re.compile(r'^(categoryImage|midImage)$'), 'uploads/category-image'),
]


def resolve_folder(field_name: str, default: str) -> str:
    for pattern, template in FOLDER_ROUTES:
        match = pattern.match(field_name)
        if match:
            return template.format(**{key: value.lower() for key, value in match.groupdict().items()})
    return default


def sniff_content_type(data: bytes, declared: Optional[str], file_name: str = '') -> str:
    """Declared type, or one detected from the bytes when the client sent none"""
    if declared and declared != OCTET_STREAM:
        return declared
    try:
        with Image.open(BytesIO(data)) as image:
            detected = Image.MIME.get(image.format)
    except (UnidentifiedImageError, OSError):
        detected = None
    if detected:
        return detected
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or OCTET_STREAM


def _read_limited(part: FilePart, limits: IngestionLimits, request_bytes: int) -> bytes:
    buffer = BytesIO()
    size = 0
    while True:
        chunk = part.stream.read(CHUNK_SIZE)
        if not chunk:
            break
        size += len(chunk)
        if size > limits.max_file_bytes:
            raise PayloadTooLargeError(
                f"Uploaded file too large. Maximum file size is {format_size(limits.max_file_bytes)}. "
                "Please compress your file or contact support."
            )
        if request_bytes + size > limits.max_request_bytes:
            raise PayloadTooLargeError(
                f"Request too large. Maximum request size is {format_size(limits.max_request_bytes)}."
            )
        buffer.write(chunk)
    return buffer.getvalue()


def ingest(parts: Iterable[Part], contract: MultipartContract, storage: ObjectStorage, limits: Optional[IngestionLimits] = None) -> IngestedUpload:
    """Parse text parts and upload file parts.

    Each file is buffered in memory and checked against the size limits
    before it is handed to ``storage``.

    Args:
        parts: Parts in the order they arrived
        contract: Declared fields and default folder of the entity
        storage: Capability that stores file bytes and returns a public URL
        limits: Size ceilings, read from the environment when omitted

    Returns:
        Parsed metadata keyed by field name and public URLs keyed by file field

    Raises:
        ValidationError: If a declared field fails to parse
        PayloadTooLargeError: If a file, the request or the file count is over the limit
        StorageNotConfiguredError: If a file arrives and storage is not configured
    """
    limits = limits or IngestionLimits.from_env()
    upload = IngestedUpload()
    request_bytes = 0
    file_count = 0
    for part in parts:
        if isinstance(part, ValuePart):
            upload.metadata[part.name] = contract.parse_value(part.name, part.value)
            continue
        if not part.filename:
            continue
        if not storage.is_configured():
            raise StorageNotConfiguredError("Storage is not configured. Please check your environment variables.")
        file_count += 1
        if file_count > limits.max_files:
            raise PayloadTooLargeError(f"Too many files. At most {limits.max_files} files may be uploaded at once.")
        data = _read_limited(part, limits, request_bytes)
        request_bytes += len(data)
        folder = resolve_folder(part.name, contract.default_folder)
        content_type = sniff_content_type(data, part.content_type, part.filename)
        stored = storage.store(data, part.filename, content_type, folder)
        logger.info("Uploaded %s to %s", part.name, stored.path)
        upload.files[part.name] = stored.public_url
    return upload


def translation_entries(
    metadata: Dict[str, Any],
    files: Dict[str, str],
    fields: Dict[str, Tuple[str, Optional[Callable[[Any], Any]]]],
    file_fields: Optional[Dict[str, str]] = None,
) -> List[Dict[str, Any]]:
    """Collect per-language translation entries from upload metadata.

    Language data arrives in one of three shapes: nested under the language
    name (``english: {"title": ...}``), flat (``english_title``), or as a
    ``translations`` list whose items carry a ``language`` code. File fields
    are name templates such as ``image{Lang}`` or ``{lang}_coverImage``.
    Languages with no data are left out.

    Args:
        metadata: Parsed text fields
        files: Uploaded file URLs by field name
        fields: Wire name -> (translation column, parser or None)
        file_fields: File field template -> translation column
    """
    listed = {}
    for item in metadata.get('translations') or []:
        if isinstance(item, dict) and item.get('language'):
            listed[item['language']] = item

    def convert(parser, raw, source):
        try:
            return parser(raw) if parser else raw
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid value for field '{source}'")

    entries = []
    for lang_key, code in LANGUAGE_KEYS.items():
        entry = {}
        nested = metadata.get(lang_key)
        if not isinstance(nested, dict):
            nested = listed.get(code, {})
        for wire, (column, parser) in fields.items():
            source = f"{lang_key}_{wire}"
            raw = metadata.get(source)
            if raw is None:
                raw = nested.get(wire)
            if raw is not None:
                entry[column] = convert(parser, raw, source)
        for template, column in (file_fields or {}).items():
            name = template.format(lang=lang_key, Lang=lang_key.capitalize())
            if name in files:
                entry[column] = files[name]
        if entry:
            entry['language'] = code
            entries.append(entry)
    return entries
