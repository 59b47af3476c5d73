# core/sa/models/page.py
from enum import Enum
from sqlalchemy import String, Integer, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .base import Base, TimestampMixin, new_id


class BlockType(str, Enum):
    SINGLE_BOOK_COLLECTION = "singleBookCollection"
    MULTI_BOOK_COLLECTION = "multiBookCollection"
    SINGLE_PODCAST_COLLECTION = "singlePodcastCollection"
    MULTI_PODCAST_COLLECTION = "multiPodcastCollection"
    SINGLE_CATEGORY_BOOKS = "singleCategoryBooks"
    SINGLE_CATEGORY_PODCASTS = "singleCategoryPodcasts"
    SINGLE_CATEGORY = "singleCategory"
    MULTI_CATEGORY = "multiCategory"


class ViewType(str, Enum):
    CAROUSEL = "carousel"
    GRID = "grid"


class DynamicPage(Base, TimestampMixin):
    __tablename__ = 'dynamic_page'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    blocks = relationship(
        'DynamicPageBlock',
        back_populates='page',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='DynamicPageBlock.order',
    )


class DynamicPageBlock(Base, TimestampMixin):
    """One section of a dynamic page.

    ``data`` carries the type-specific payload (collection/category ids) and
    ``block_metadata`` per-language display hints such as titles.
    """
    __tablename__ = 'dynamic_page_block'

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    page_id: Mapped[str] = mapped_column(ForeignKey('dynamic_page.id', ondelete='CASCADE'), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    view_type: Mapped[str] = mapped_column(String(20), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    block_metadata: Mapped[dict | None] = mapped_column('metadata', JSON, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    page = relationship('DynamicPage', back_populates='blocks')

    __table_args__ = (
        Index('idx_dynamic_page_block_page_order', 'page_id', 'order'),
    )
