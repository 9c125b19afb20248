from __future__ import annotations

from ..extensions import db
from cafepos.time_utils import to_utc_z


class User(db.Model):
    """
    Staff account used for login and attribution.

    The user's branch decides where tables, orders and payments are booked.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), nullable=False, unique=True, index=True)

    # Bcrypt hash; legacy rows may still hold a hex SHA-256 digest
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(32), nullable=False, default="admin")
    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=True, index=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    branch = db.relationship("Branch", backref=db.backref("users", lazy=True))

    def __repr__(self) -> str:
        return f"<User id={self.id} username={self.username!r} branch_id={self.branch_id}>"

    def to_profile(self) -> dict:
        """Shape returned by the login endpoint."""
        return {
            "id": self.id,
            "username": self.username,
            "name": self.username,
            "role": self.role,
            "branch_id": self.branch_id,
            "branch": self.branch.name if self.branch else None,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "branch_id": self.branch_id,
            "branch_name": self.branch.name if self.branch else None,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
        }
