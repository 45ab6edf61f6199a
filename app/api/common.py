import uuid

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.restaurant import CONFIRM_STATUS_APPROVED, Restaurant


def parse_uuid_or_404(raw: str, detail: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(raw or "").strip())
    except ValueError:
        raise HTTPException(status_code=404, detail=detail)


def principal_uuid_or_401(principal: dict) -> uuid.UUID:
    try:
        return uuid.UUID(str(principal.get("sub") or "").strip())
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token")


def confirmed_restaurant_or_404(db: Session, raw_id: str) -> Restaurant:
    restaurant_id = parse_uuid_or_404(raw_id, "Invalid Restaurant Id")
    restaurant = db.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise HTTPException(status_code=404, detail="Invalid Restaurant Id")
    if restaurant.confirm_status != CONFIRM_STATUS_APPROVED:
        raise HTTPException(status_code=403, detail="This restaurant is not confirmed yet")
    return restaurant
