from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.api.common import principal_uuid_or_401
from app.api.policies import orders_policy
from app.core.deps import ROLE_USER, require_role
from app.db.session import get_db
from app.models.order import Order
from app.services.listing import list_resource

router = APIRouter()


@router.get("/me/orders")
def list_my_orders(request: Request, db: Session = Depends(get_db), principal=Depends(require_role(ROLE_USER))):
    user_id = principal_uuid_or_401(principal)
    base = db.query(Order).filter(Order.user_id == user_id)
    return list_resource(base, Order, request.query_params, orders_policy())
