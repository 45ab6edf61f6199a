from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.policies import restaurants_policy, users_policy
from app.core.deps import ROLE_ADMIN, require_role
from app.db.session import get_db
from app.models.restaurant import CONFIRM_STATUS_PENDING, Restaurant
from app.models.user import User
from app.services.listing import list_resource

router = APIRouter()


@router.get("/restaurant-requests")
def list_restaurant_requests(request: Request, db: Session = Depends(get_db), admin=Depends(require_role(ROLE_ADMIN))):
    base = db.query(Restaurant).filter(Restaurant.confirm_status == CONFIRM_STATUS_PENDING)
    return list_resource(base, Restaurant, request.query_params, restaurants_policy())


@router.get("/users")
def list_users(request: Request, db: Session = Depends(get_db), admin=Depends(require_role(ROLE_ADMIN))):
    return list_resource(db.query(User), User, request.query_params, users_policy())
