"""Category aggregate: a two-level tree products are filed under.

A category either is top-level or has a top-level parent. Products can only
be created in an active category.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String

from marketplace.catalogue.events import CategoryCreated, CategoryStatusChanged, CategoryUpdated
from marketplace.domain import marketplace


class CategoryStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


@marketplace.aggregate
class Category:
    category_name: String(required=True, max_length=50)
    slug: String(required=True, max_length=100, unique=True)
    parent_id: Identifier()
    status: String(choices=CategoryStatus, default=CategoryStatus.ACTIVE.value)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, category_name, slug, parent_id=None):
        now = datetime.now(UTC)
        category = cls(
            category_name=category_name,
            slug=slug,
            parent_id=parent_id,
            status=CategoryStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )
        category.raise_(
            CategoryCreated(
                category_id=category.id,
                category_name=category_name,
                slug=slug,
                parent_id=parent_id,
                created_at=now,
            )
        )
        return category

    @property
    def is_active(self) -> bool:
        return self.status == CategoryStatus.ACTIVE.value

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None

    def update_details(self, category_name=None, slug=None, parent_id=None):
        if category_name is not None:
            self.category_name = category_name
        if slug is not None:
            self.slug = slug
        if parent_id is not None:
            self.parent_id = parent_id
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CategoryUpdated(
                category_id=self.id,
                category_name=self.category_name,
                slug=self.slug,
                parent_id=self.parent_id,
            )
        )

    def change_status(self, new_status):
        if new_status == self.status:
            return

        previous = self.status
        self.status = new_status
        self.updated_at = datetime.now(UTC)
        self.raise_(CategoryStatusChanged(category_id=self.id, previous_status=previous, new_status=new_status))


@marketplace.repository(part_of=Category)
class CategoryRepository:
    def with_slug(self, slug) -> Category | None:
        return self._dao.query.filter(slug=slug).all().first

    def has_children(self, category_id) -> bool:
        return self._dao.query.filter(parent_id=str(category_id)).all().first is not None
