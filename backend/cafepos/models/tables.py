from __future__ import annotations

from ..extensions import db
from cafepos.time_utils import to_utc_z
from cafepos.validation import from_cents

TABLE_STATUS_OPEN = "open"
TABLE_STATUS_RESERVED = "reserved"
TABLE_STATUS_CLOSED = "closed"

TABLE_STATUSES = (TABLE_STATUS_OPEN, TABLE_STATUS_RESERVED, TABLE_STATUS_CLOSED)


class Table(db.Model):
    """
    Running tab for a physical seating area.

    total_cents accrues table orders and settlement payments while the tab
    lives; rows are never deleted, closing is a status flip.
    """
    __tablename__ = "tables"
    __table_args__ = (
        db.Index("ix_tables_branch_status", "branch_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Display names are not unique, two tabs can share "T1"
    name = db.Column(db.String(64), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=TABLE_STATUS_OPEN, index=True)

    opened_at = db.Column(db.DateTime(timezone=True), nullable=False)
    closed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    total_cents = db.Column(db.Integer, nullable=False, default=0)

    opened_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=False, index=True)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    branch = db.relationship("Branch")
    opened_by = db.relationship("User")

    def __repr__(self) -> str:
        return f"<Table id={self.id} name={self.name!r} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "opened_at": to_utc_z(self.opened_at),
            "closed_at": to_utc_z(self.closed_at) if self.closed_at else None,
            "total_amount": from_cents(self.total_cents),
            "total_cents": self.total_cents,
            "opened_by_user_id": self.opened_by_user_id,
            "branch_id": self.branch_id,
            "branch_name": self.branch.name if self.branch else None,
            "updated_at": to_utc_z(self.updated_at),
        }
