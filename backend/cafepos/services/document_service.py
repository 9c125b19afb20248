# Overview: Reference number allocation for orders and payments.

from __future__ import annotations

from ..extensions import db
from ..models import DocumentSequence
from .concurrency import lock_for_update

DOCUMENT_ORDER = "ORDER"
DOCUMENT_PAYMENT = "PAYMENT"

PREFIXES = {
    DOCUMENT_ORDER: "ORD",
    DOCUMENT_PAYMENT: "PAY",
}


class DocumentSequenceError(Exception):
    """Raised when document sequence operations fail."""
    pass


def next_document_number(*, branch_id: int, document_type: str, pad: int = 6) -> str:
    """
    Allocate the next reference number for a branch/type, e.g. "ORD-001-000042".

    Runs inside the caller's transaction: the counter row is locked until the
    caller commits, and is rolled back with it. A concurrent first insert for
    the same (branch, type) raises IntegrityError, which callers retry.
    """
    if not branch_id:
        raise DocumentSequenceError("branch_id is required")
    prefix = PREFIXES.get(document_type)
    if prefix is None:
        raise DocumentSequenceError(f"Unknown document type: {document_type}")

    seq = lock_for_update(
        db.session.query(DocumentSequence).filter_by(branch_id=branch_id, document_type=document_type)
    ).first()
    if seq is None:
        seq = DocumentSequence(branch_id=branch_id, document_type=document_type, next_number=1)
        db.session.add(seq)
        db.session.flush()

    number = seq.next_number
    seq.next_number = number + 1
    db.session.flush()

    return f"{prefix}-{branch_id:03d}-{number:0{pad}d}"
