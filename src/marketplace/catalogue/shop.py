"""Shop aggregate: one shop per seller."""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String, Text

from marketplace.catalogue.events import ShopCreated, ShopStatusChanged, ShopUpdated
from marketplace.domain import marketplace


class ShopStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


@marketplace.aggregate
class Shop:
    owner_id: Identifier(required=True, unique=True)
    shop_name: String(required=True, max_length=150)
    description: Text()
    address: Text()
    status: String(choices=ShopStatus, default=ShopStatus.ACTIVE.value)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(cls, owner_id, shop_name, description=None, address=None):
        now = datetime.now(UTC)
        shop = cls(
            owner_id=owner_id,
            shop_name=shop_name,
            description=description,
            address=address,
            status=ShopStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )
        shop.raise_(
            ShopCreated(
                shop_id=shop.id,
                owner_id=owner_id,
                shop_name=shop_name,
                created_at=now,
            )
        )
        return shop

    @property
    def is_active(self) -> bool:
        return self.status == ShopStatus.ACTIVE.value

    def is_managed_by(self, user_id, role=None) -> bool:
        return role == "admin" or str(self.owner_id) == str(user_id)

    def update_details(self, shop_name=None, description=None, address=None):
        """Change the fields that were given; omitted ones keep their value."""
        if shop_name is not None:
            self.shop_name = shop_name
        if description is not None:
            self.description = description
        if address is not None:
            self.address = address
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ShopUpdated(
                shop_id=self.id,
                shop_name=self.shop_name,
                description=self.description,
                address=self.address,
            )
        )

    def change_status(self, new_status):
        if new_status == self.status:
            return

        previous = self.status
        self.status = new_status
        self.updated_at = datetime.now(UTC)
        self.raise_(ShopStatusChanged(shop_id=self.id, previous_status=previous, new_status=new_status))


@marketplace.repository(part_of=Shop)
class ShopRepository:
    def for_owner(self, owner_id) -> Shop | None:
        return self._dao.query.filter(owner_id=str(owner_id)).all().first
