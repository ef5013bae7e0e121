from app import db
from app.data.core.user_created_base import UserCreatedBase
from app.buisness.locations.location_graph import Location as LocationValue, LocationType


class Location(UserCreatedBase):
    """A site in the CENTRAL -> BRANCH -> FIELD hierarchy"""
    __tablename__ = 'locations'

    name = db.Column(db.String(150), nullable=False)
    location_type = db.Column(db.String(20), nullable=False)  # CENTRAL/BRANCH/FIELD
    parent_id = db.Column(db.String(64), db.ForeignKey('locations.id'), nullable=True)

    parent = db.relationship('Location', remote_side='Location.id')

    def to_domain(self) -> LocationValue:
        return LocationValue(
            id=self.id,
            name=self.name,
            type=LocationType(self.location_type),
            parent_id=self.parent_id,
        )

    def __repr__(self):
        return f'<Location {self.id} {self.location_type}>'
