from app import db
from app.utils.clock import utcnow
from sqlalchemy.orm import declared_attr


class UserCreatedBase(db.Model):
    """Abstract base class for entities carrying a string id and an audit trail"""

    __abstract__ = True

    @declared_attr
    def __tablename__(cls):
        return cls.__name__.lower() + 's'

    id = db.Column(db.String(64), primary_key=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)
    # Plain column: users reference locations, a foreign key back would be circular
    created_by_id = db.Column(db.String(64), nullable=True)
