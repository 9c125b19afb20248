from __future__ import annotations

from ..extensions import db


class DocumentSequence(db.Model):
    """
    Per-branch counters for human-readable reference numbers.

    Replaces wall-clock derived numbers, which collide under concurrent
    checkouts.
    """
    __tablename__ = "document_sequences"
    __table_args__ = (
        db.UniqueConstraint("branch_id", "document_type", name="uq_document_sequences_branch_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    branch_id = db.Column(db.Integer, db.ForeignKey("branches.id"), nullable=False, index=True)
    document_type = db.Column(db.String(32), nullable=False)
    next_number = db.Column(db.Integer, nullable=False, default=1)
