from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.api.common import confirmed_restaurant_or_404, parse_uuid_or_404, principal_uuid_or_401
from app.api.policies import ACCOUNT_PRIVATE_FIELDS, menu_items_policy, orders_policy, restaurants_policy, reviews_policy
from app.core.deps import ROLE_RESTAURANT, require_role
from app.db.session import get_db
from app.models.menu_item import MenuItem
from app.models.order import Order
from app.models.restaurant import CONFIRM_STATUS_APPROVED, Restaurant
from app.models.review import Review
from app.schemas.menu_items import MenuItemCreate, MenuItemUpdate
from app.services.listing import STATUS_SUCCESS, list_resource, parse_listing_request
from app.services.query_executor import row_to_document

router = APIRouter()


@router.get("")
def list_restaurants(request: Request, db: Session = Depends(get_db)):
    base = db.query(Restaurant).filter(Restaurant.confirm_status == CONFIRM_STATUS_APPROVED)
    return list_resource(base, Restaurant, request.query_params, restaurants_policy())


@router.get("/me")
def get_my_restaurant(db: Session = Depends(get_db), principal=Depends(require_role(ROLE_RESTAURANT))):
    restaurant = db.get(Restaurant, principal_uuid_or_401(principal))
    if restaurant is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return {"status": STATUS_SUCCESS, "user": row_to_document(restaurant, hidden=ACCOUNT_PRIVATE_FIELDS)}


@router.get("/me/orders")
def list_my_incoming_orders(
    request: Request,
    db: Session = Depends(get_db),
    principal=Depends(require_role(ROLE_RESTAURANT)),
):
    restaurant_id = principal_uuid_or_401(principal)
    base = db.query(Order).filter(Order.restaurant_id == restaurant_id)
    return list_resource(base, Order, request.query_params, orders_policy())


@router.get("/me/reviews")
def list_my_incoming_reviews(
    request: Request,
    db: Session = Depends(get_db),
    principal=Depends(require_role(ROLE_RESTAURANT)),
):
    restaurant_id = principal_uuid_or_401(principal)
    base = db.query(Review).filter(Review.restaurant_id == restaurant_id)
    return list_resource(base, Review, request.query_params, reviews_policy())



def _owned_menu_item(db: Session, principal: dict, raw_item_id: str, action: str) -> MenuItem:
    item_id = parse_uuid_or_404(raw_item_id, f"Menu Item with id {raw_item_id} is not found")
    item = db.get(MenuItem, item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"Menu Item with id {raw_item_id} is not found")
    if item.restaurant_id != principal_uuid_or_401(principal):
        raise HTTPException(status_code=403, detail=f"You don't have permission to {action} this menu item")
    return item


@router.post("/me/menu-items", status_code=201)
def add_menu_item(
    payload: MenuItemCreate,
    db: Session = Depends(get_db),
    principal=Depends(require_role(ROLE_RESTAURANT)),
):
    restaurant = db.get(Restaurant, principal_uuid_or_401(principal))
    if restaurant is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    item = MenuItem(restaurant_id=restaurant.id, **payload.model_dump())
    db.add(item); db.commit(); db.refresh(item)
    return {"status": "created", "menu_item": row_to_document(item)}


@router.patch("/me/menu-items/{item_id}")
def update_menu_item(
    item_id: str,
    payload: MenuItemUpdate,
    db: Session = Depends(get_db),
    principal=Depends(require_role(ROLE_RESTAURANT)),
):
    item = _owned_menu_item(db, principal, item_id, "update")
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(item, key, value)
    db.add(item); db.commit()
    return {"status": "updated"}


@router.delete("/me/menu-items/{item_id}")
def delete_menu_item(
    item_id: str,
    db: Session = Depends(get_db),
    principal=Depends(require_role(ROLE_RESTAURANT)),
):
    item = _owned_menu_item(db, principal, item_id, "delete")
    db.delete(item); db.commit()
    return {"status": "deleted"}


@router.get("/{restaurant_id}")
def get_restaurant(restaurant_id: str, db: Session = Depends(get_db)):
    restaurant = confirmed_restaurant_or_404(db, restaurant_id)
    return {"status": STATUS_SUCCESS, "restaurant": row_to_document(restaurant, hidden=ACCOUNT_PRIVATE_FIELDS)}


@router.get("/{restaurant_id}/menu-items")
def list_menu_items(restaurant_id: str, request: Request, db: Session = Depends(get_db)):
    policy = menu_items_policy()
    directives = parse_listing_request(request.query_params, policy)
    restaurant = confirmed_restaurant_or_404(db, restaurant_id)
    base = db.query(MenuItem).filter(MenuItem.restaurant_id == restaurant.id)
    return list_resource(base, MenuItem, directives, policy)


@router.get("/{restaurant_id}/menu-items/{item_id}")
def get_menu_item(restaurant_id: str, item_id: str, db: Session = Depends(get_db)):
    restaurant = confirmed_restaurant_or_404(db, restaurant_id)
    menu_item_id = parse_uuid_or_404(item_id, "Not Found")
    item = (
        db.query(MenuItem)
        .filter(MenuItem.id == menu_item_id, MenuItem.restaurant_id == restaurant.id)
        .first()
    )
    if item is None:
        raise HTTPException(status_code=404, detail="Not Found")
    return {"status": STATUS_SUCCESS, "menu_item": row_to_document(item)}


@router.get("/{restaurant_id}/reviews")
def list_restaurant_reviews(restaurant_id: str, request: Request, db: Session = Depends(get_db)):
    policy = reviews_policy()
    directives = parse_listing_request(request.query_params, policy)
    restaurant = confirmed_restaurant_or_404(db, restaurant_id)
    base = db.query(Review).filter(Review.restaurant_id == restaurant.id)
    return list_resource(base, Review, directives, policy)
