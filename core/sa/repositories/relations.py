# core/sa/repositories/relations.py
"""Many-to-many link writes and ordered id-list member resolution."""
from typing import Any, Dict, List, Optional, Sequence, Type

from sqlalchemy.orm import Session

from core.errors import ValidationError


def _unique(ids: Sequence[str]) -> List[str]:
    seen = set()
    result = []
    for item in ids:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def load_targets(session: Session, model: Type[Any], ids: Optional[Sequence[str]], label: str) -> List[Any]:
    """Fetch the entities behind an incoming id list.

    Raises:
        ValidationError: If the value is not a list of ids or any id does not exist
    """
    if ids is None:
        return []
    if isinstance(ids, str) or not all(isinstance(item, str) for item in ids):
        raise ValidationError(f"{label} must be a list of ids")
    wanted = _unique(ids)
    if not wanted:
        return []
    found = {entity.id: entity for entity in session.query(model).filter(model.id.in_(wanted)).all()}
    missing = [item for item in wanted if item not in found]
    if missing:
        raise ValidationError(f"Unknown {label} id(s): {', '.join(missing)}")
    return [found[item] for item in wanted]


def connect_links(session: Session, entity: Any, attribute: str, model: Type[Any], ids: Optional[Sequence[str]], label: str) -> None:
    """Add links on create. Existing links are kept."""
    collection = getattr(entity, attribute)
    for target in load_targets(session, model, ids, label):
        if target not in collection:
            collection.append(target)


def set_links(session: Session, entity: Any, attribute: str, model: Type[Any], ids: Optional[Sequence[str]], label: str) -> None:
    """Replace the full membership on update.

    ``None`` means the caller did not send the field and leaves the links as
    they are; an empty list removes every link.
    """
    if ids is None:
        return
    setattr(entity, attribute, load_targets(session, model, ids, label))


def resolve_members(
    session: Session,
    translation_model: Type[Any],
    parent_column: str,
    ids: Sequence[str],
    language: str,
    options: Sequence[Any] = (),
) -> List[Any]:
    """Resolve an ordered id list to translation rows in one language.

    Ids with no matching row (deleted members, or members not translated into
    ``language``) are dropped. The batch query does not keep order, so the
    result is re-sorted into the order of ``ids``.
    """
    wanted = _unique(ids or [])
    if not wanted:
        return []
    column = getattr(translation_model, parent_column)
    query = session.query(translation_model).filter(
        column.in_(wanted),
        translation_model.language == language
    )
    if options:
        query = query.options(*options)
    by_parent: Dict[str, Any] = {getattr(row, parent_column): row for row in query.all()}
    return [by_parent[item] for item in wanted if item in by_parent]


def resolve_entities(session: Session, model: Type[Any], ids: Sequence[str], options: Sequence[Any] = ()) -> List[Any]:
    """Canonical counterpart of ``resolve_members``: missing ids are dropped, order kept"""
    wanted = _unique(ids or [])
    if not wanted:
        return []
    query = session.query(model).filter(model.id.in_(wanted))
    if options:
        query = query.options(*options)
    by_id = {entity.id: entity for entity in query.all()}
    return [by_id[item] for item in wanted if item in by_id]
