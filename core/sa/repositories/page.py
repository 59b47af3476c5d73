# core/sa/repositories/page.py
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from core.errors import ConflictError, NotFoundError, ValidationError
from core.sa.models import BlockType, DynamicPage, DynamicPageBlock, ViewType
from .base import read_guard, require_text, unit_of_work

logger = logging.getLogger(__name__)

BLOCK_TYPES = tuple(item.value for item in BlockType)
VIEW_TYPES = tuple(item.value for item in ViewType)


def block_to_dict(block: DynamicPageBlock) -> Dict[str, Any]:
    return {
        'id': block.id,
        'page_id': block.page_id,
        'type': block.type,
        'view_type': block.view_type,
        'order': block.order,
        'data': block.data,
        'metadata': block.block_metadata,
        'image_url': block.image_url,
    }


def page_to_dict(page: DynamicPage, blocks: Optional[List[DynamicPageBlock]] = None) -> Dict[str, Any]:
    data = {
        'id': page.id,
        'title': page.title,
        'slug': page.slug,
        'created_at': page.created_at,
        'updated_at': page.updated_at,
    }
    if blocks is not None:
        data['blocks'] = [block_to_dict(block) for block in sorted(blocks, key=lambda b: (b.order, b.id))]
    return data


class PageRepository:
    """Dynamic page layouts and their ordered blocks."""

    def __init__(self, session: Session):
        self.session = session

    def _validate_block(self, block: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
        """Check one block payload and return the column values it sets.

        Args:
            block: Raw block with ``type``, ``view_type``, ``order``, ``data``,
                ``metadata`` and ``image_url`` keys
            partial: Only check the keys that are present
        """
        values = {}
        block_type = block.get('type')
        if block_type is not None or not partial:
            if block_type not in BLOCK_TYPES:
                raise ValidationError(f"Invalid block type '{block_type}'. Must be one of: {', '.join(BLOCK_TYPES)}")
            values['type'] = block_type
        view_type = block.get('view_type')
        if view_type is not None or not partial:
            if view_type not in VIEW_TYPES:
                raise ValidationError(f"Invalid view type '{view_type}'. Must be one of: {', '.join(VIEW_TYPES)}")
            values['view_type'] = view_type
        order = block.get('order')
        if order is not None or not partial:
            if isinstance(order, bool) or not isinstance(order, int):
                raise ValidationError("Block order must be an integer")
            values['order'] = order
        data = block.get('data')
        if data is not None or not partial:
            if data is None:
                data = {}
            if not isinstance(data, dict):
                raise ValidationError("Block data must be an object")
            values['data'] = data
        if block.get('metadata') is not None:
            if not isinstance(block['metadata'], dict):
                raise ValidationError("Block metadata must be an object")
            values['block_metadata'] = block['metadata']
        if block.get('image_url') is not None:
            values['image_url'] = block['image_url']
        return values

    def _ensure_slug_free(self, slug: str, exclude_id: Optional[str] = None) -> None:
        query = self.session.query(DynamicPage.id).filter(DynamicPage.slug == slug)
        if exclude_id:
            query = query.filter(DynamicPage.id != exclude_id)
        if query.first() is not None:
            raise ConflictError(f"Page with slug '{slug}' already exists")

    def _get_page(self, page_id: str) -> DynamicPage:
        with read_guard(self.session, "Failed to fetch page"):
            page = self.session.get(DynamicPage, page_id) if page_id else None
        if page is None:
            raise NotFoundError("Page not found")
        return page

    def create_page(self, title: str, slug: str) -> Dict[str, Any]:
        return self.create_page_with_blocks(title, slug, [])

    def create_page_with_blocks(self, title: str, slug: str, blocks: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Create a page and all of its blocks, or nothing at all"""
        require_text({'title': title}, 'title')
        require_text({'slug': slug}, 'slug')
        values = [self._validate_block(block) for block in blocks or []]
        with unit_of_work(self.session, "Failed to create page with blocks" if values else "Failed to create page"):
            self._ensure_slug_free(slug)
            page = DynamicPage(title=title, slug=slug)
            self.session.add(page)
            self.session.flush()
            created = [DynamicPageBlock(page_id=page.id, **value) for value in values]
            self.session.add_all(created)
        logger.info("Created page %s with %d block(s)", slug, len(created))
        return page_to_dict(page, created)

    def update_page(self, page_id: str, title: Optional[str] = None, slug: Optional[str] = None) -> Dict[str, Any]:
        page = self._get_page(page_id)
        with unit_of_work(self.session, "Failed to update page"):
            if slug is not None:
                require_text({'slug': slug}, 'slug')
                self._ensure_slug_free(slug, exclude_id=page.id)
                page.slug = slug
            if title is not None:
                require_text({'title': title}, 'title')
                page.title = title
        return page_to_dict(page)

    def add_blocks(self, page_id: str, blocks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Append blocks to an existing page in one unit"""
        self._get_page(page_id)
        if not blocks:
            raise ValidationError("At least one block is required")
        values = [self._validate_block(block) for block in blocks]
        with unit_of_work(self.session, "Failed to add collections to page"):
            created = [DynamicPageBlock(page_id=page_id, **value) for value in values]
            self.session.add_all(created)
        return [block_to_dict(block) for block in created]

    def update_blocks(self, blocks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Patch several blocks atomically. Each entry names its block by ``id``.

        Raises:
            NotFoundError: If any block id is unknown; no block is changed then
        """
        if not blocks:
            raise ValidationError("At least one block is required")
        updated = []
        with unit_of_work(self.session, "Failed to update page blocks"):
            for block in blocks:
                values = self._validate_block(block, partial=True)
                row = self.session.get(DynamicPageBlock, block.get('id')) if block.get('id') else None
                if row is None:
                    raise NotFoundError(f"Block {block.get('id')} not found")
                for key, value in values.items():
                    setattr(row, key, value)
                updated.append(row)
        return [block_to_dict(row) for row in updated]

    def get_by_slug(self, slug: str) -> Dict[str, Any]:
        with read_guard(self.session, "Failed to fetch page"):
            page = (
                self.session.query(DynamicPage)
                .options(selectinload(DynamicPage.blocks))
                .filter(DynamicPage.slug == slug)
                .first()
            )
        if page is None:
            raise NotFoundError("Page not found")
        return page_to_dict(page, page.blocks)

    def list_pages(self) -> List[Dict[str, Any]]:
        """All pages with the number of blocks each holds"""
        with read_guard(self.session, "Failed to fetch pages"):
            rows = (
                self.session.query(DynamicPage, func.count(DynamicPageBlock.id))
                .outerjoin(DynamicPageBlock, DynamicPageBlock.page_id == DynamicPage.id)
                .group_by(DynamicPage.id)
                .order_by(DynamicPage.created_at, DynamicPage.id)
                .all()
            )
        result = []
        for page, block_count in rows:
            data = page_to_dict(page)
            data['block_count'] = block_count
            result.append(data)
        return result

    def delete_page(self, page_id: str) -> None:
        page = self._get_page(page_id)
        with unit_of_work(self.session, "Failed to delete page"):
            self.session.delete(page)
        logger.info("Deleted page %s", page_id)
