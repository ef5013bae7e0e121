from app import db, login_manager
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from app.utils.clock import utcnow
from app.buisness.core.actor import Actor, Role


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(64), primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    name = db.Column(db.String(150), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(30), nullable=False, default=Role.WORKER.value)
    location_id = db.Column(db.String(64), db.ForeignKey('locations.id'), nullable=True)
    job_title = db.Column(db.String(100), nullable=True)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    location = db.relationship('Location', foreign_keys=[location_id])

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def to_actor(self) -> Actor:
        return Actor(id=self.id, role=Role(self.role), location_id=self.location_id, name=self.name)

    def __repr__(self):
        return f'<User {self.username}>'


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, user_id)
