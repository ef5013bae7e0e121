from app import db
from app.data.core.user_created_base import UserCreatedBase
from app.buisness.inventory.catalog import Item as ItemValue, ItemType


class Item(UserCreatedBase):
    """Catalog entry; identified by id, never edited by the operations core"""
    __tablename__ = 'items'

    name = db.Column(db.String(200), nullable=False)
    sku = db.Column(db.String(50), unique=True, nullable=False)
    category = db.Column(db.String(100), nullable=False)
    unit = db.Column(db.String(30), nullable=False, default='Unit')
    item_type = db.Column(db.String(20), nullable=False, default=ItemType.CONSUMABLE.value)

    def to_domain(self) -> ItemValue:
        return ItemValue(
            id=self.id,
            name=self.name,
            sku=self.sku,
            category=self.category,
            unit=self.unit,
            item_type=ItemType(self.item_type),
        )

    def __repr__(self):
        return f'<Item {self.sku}>'
