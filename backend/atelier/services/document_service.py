# Overview: Allocation of human-readable sale/order/return document numbers.

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import DocumentSequence, Store

DOCUMENT_SALE = "SALE"
DOCUMENT_ORDER = "ORDER"
DOCUMENT_RETURN = "RETURN"

DOCUMENT_PREFIXES = {
    DOCUMENT_SALE: "S",
    DOCUMENT_ORDER: "ORD",
    DOCUMENT_RETURN: "R",
}

STORE_CODES = {
    Store.BOUTIQUE: "B",
    Store.ONLINE: "O",
}


def _claim_number(store: Store, document_type: str) -> int | None:
    stmt = (
        update(DocumentSequence)
        .where(
            DocumentSequence.store == store,
            DocumentSequence.document_type == document_type,
        )
        .values(next_number=DocumentSequence.next_number + 1)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if not result.rowcount:
        return None
    current = (
        db.session.query(DocumentSequence.next_number)
        .filter_by(store=store, document_type=document_type)
        .scalar()
    )
    return current - 1


def next_document_number(*, store: Store, document_type: str, pad: int = 6) -> str:
    """
    Allocate the next document number for a store/type, e.g. "S-B-000042".

    Runs inside the caller's transaction (no commit). The increment is a
    single UPDATE, so concurrent writers serialize on the sequence row.
    """
    prefix = DOCUMENT_PREFIXES[document_type]

    next_num = _claim_number(store, document_type)
    if next_num is None:
        seq = DocumentSequence(store=store, document_type=document_type, next_number=2)
        try:
            with db.session.begin_nested():
                db.session.add(seq)
            next_num = 1
        except IntegrityError:
            next_num = _claim_number(store, document_type)
            if next_num is None:
                raise

    return f"{prefix}-{STORE_CODES[store]}-{next_num:0{pad}d}"
