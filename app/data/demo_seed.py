from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from app.core.deps import ROLE_ADMIN, ROLE_RESTAURANT, ROLE_USER
from app.core.security import create_access_token, hash_password
from app.db.session import Base, SessionLocal, engine
from app.models.menu_item import MenuItem
from app.models.order import Order
from app.models.restaurant import (
    CONFIRM_STATUS_APPROVED,
    CONFIRM_STATUS_PENDING,
    CONFIRM_STATUS_REJECTED,
    Restaurant,
)
from app.models.review import Review
from app.models.user import User


UTC = timezone.utc
SEED_EPOCH = datetime(2026, 1, 5, 12, 0, tzinfo=UTC)
DEMO_EMAIL_DOMAIN = "demo.example.com"
DEMO_PASSWORD = "DemoPassword-123"
DEMO_ADMIN_ID = uuid.uuid5(uuid.NAMESPACE_DNS, f"admin.{DEMO_EMAIL_DOMAIN}")

RESTAURANTS = [
    {"name": "Koshary El Tahrir", "confirm_status": CONFIRM_STATUS_APPROVED, "address": "Tahrir Sq, Cairo"},
    {"name": "Pizza Corner", "confirm_status": CONFIRM_STATUS_APPROVED, "address": "Corniche Rd, Alexandria"},
    {"name": "Green Bowl", "confirm_status": CONFIRM_STATUS_PENDING, "address": "Maadi, Cairo"},
    {"name": "Late Night Grill", "confirm_status": CONFIRM_STATUS_REJECTED, "address": "Giza"},
]

MENU = [
    ("Koshary small", "25.00", ["rice", "lentils", "pasta"]),
    ("Koshary large", "40.00", ["rice", "lentils", "pasta", "chickpeas"]),
    ("Margherita", "95.00", ["tomato", "mozzarella", "basil"]),
    ("Pepperoni", "120.00", ["tomato", "mozzarella", "pepperoni"]),
    ("Rice pudding", "30.00", ["milk", "rice", "sugar"]),
]

USERS = [
    {"name": "Mona Adel", "phone": "01012345678", "address": "Nasr City, Cairo"},
    {"name": "Omar Samir", "phone": "01198765432", "address": "Smouha, Alexandria"},
]


def _email(name: str) -> str:
    return f"{name.lower().replace(' ', '.')}@{DEMO_EMAIL_DOMAIN}"


def _is_seeded(db: Session) -> bool:
    return db.query(Restaurant).filter(Restaurant.email.like(f"%@{DEMO_EMAIL_DOMAIN}")).first() is not None


def seed_demo_data(db: Session) -> dict[str, int]:
    if _is_seeded(db):
        return {}

    password_hash = hash_password(DEMO_PASSWORD)
    tick = iter(SEED_EPOCH + timedelta(minutes=i) for i in range(10_000))

    restaurants = [
        Restaurant(
            name=item["name"],
            email=_email(item["name"]),
            address=item["address"],
            confirm_status=item["confirm_status"],
            password_hash=password_hash,
            created_at=next(tick),
        )
        for item in RESTAURANTS
    ]
    users = [
        User(email=_email(item["name"]), password_hash=password_hash, created_at=next(tick), **item)
        for item in USERS
    ]
    db.add_all(restaurants + users)
    db.flush()

    menu_items = []
    for restaurant in restaurants:
        for name, price, ingredients in MENU:
            menu_items.append(
                MenuItem(
                    restaurant_id=restaurant.id,
                    name=name,
                    price=Decimal(price),
                    ingredients=ingredients,
                    available_for_sale=name != "Rice pudding",
                    created_at=next(tick),
                )
            )

    orders = []
    reviews = []
    open_restaurants = [r for r in restaurants if r.confirm_status == CONFIRM_STATUS_APPROVED]
    for index, (restaurant, user) in enumerate((r, u) for r in open_restaurants for u in users):
        name, price, _ = MENU[index % len(MENU)]
        quantity = index % 3 + 1
        orders.append(
            Order(
                restaurant_id=restaurant.id,
                user_id=user.id,
                items=[{"name": name, "quantity": quantity, "price": price}],
                total_price=Decimal(price) * quantity,
                delivered=index % 2 == 0,
                address=user.address,
                created_at=next(tick),
            )
        )
        reviews.append(
            Review(
                restaurant_id=restaurant.id,
                user_id=user.id,
                rating=5 - index % 3,
                comment=f"Ordered {name.lower()}",
                created_at=next(tick),
            )
        )

    db.add_all(menu_items + orders + reviews)
    db.commit()
    return {
        "restaurants": len(restaurants),
        "users": len(users),
        "menu_items": len(menu_items),
        "orders": len(orders),
        "reviews": len(reviews),
    }


def demo_tokens(db: Session) -> dict[str, str]:
    tokens = {f"admin@{DEMO_EMAIL_DOMAIN}": create_access_token(DEMO_ADMIN_ID, ROLE_ADMIN)}
    demo = f"%@{DEMO_EMAIL_DOMAIN}"
    for restaurant in db.query(Restaurant).filter(Restaurant.email.like(demo)).order_by(Restaurant.created_at):
        tokens[restaurant.email] = create_access_token(restaurant.id, ROLE_RESTAURANT)
    for user in db.query(User).filter(User.email.like(demo)).order_by(User.created_at):
        tokens[user.email] = create_access_token(user.id, ROLE_USER)
    return tokens


def main() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        created = seed_demo_data(db)
        tokens = demo_tokens(db)
    finally:
        db.close()
    if created:
        print("demo seed done: " + ", ".join(f"{key}={value}" for key, value in created.items()))
    else:
        print("demo seed skipped: data already present")
    for email, token in tokens.items():
        print(f"{email}: {token}")


if __name__ == "__main__":
    main()
