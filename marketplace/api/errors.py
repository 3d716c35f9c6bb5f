# marketplace/api/errors.py
from fastapi import HTTPException

from marketplace.domain.errors import (
    ConflictError,
    InvalidStateError,
    ItemsUnavailable,
    MarketplaceError,
    NotFoundError,
    TransientFailure,
)


def to_http(e: MarketplaceError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=e.message)
    if isinstance(e, ItemsUnavailable):
        return HTTPException(
            status_code=400,
            detail={"message": e.message, "product_ids": e.product_ids},
        )
    if isinstance(e, InvalidStateError):
        return HTTPException(status_code=400, detail=e.message)
    if isinstance(e, ConflictError):
        return HTTPException(status_code=409, detail=e.message)
    if isinstance(e, TransientFailure):
        return HTTPException(status_code=503, detail=e.message)
    return HTTPException(status_code=500, detail="Server error")
