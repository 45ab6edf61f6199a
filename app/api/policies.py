from app.services.listing import ListingPolicy, listing_policy

ACCOUNT_PRIVATE_FIELDS = frozenset({"password_hash"})


def restaurants_policy() -> ListingPolicy:
    return listing_policy("restaurants", private_fields=ACCOUNT_PRIVATE_FIELDS)


def menu_items_policy() -> ListingPolicy:
    return listing_policy("menu_items", default_page_size=100)


def orders_policy() -> ListingPolicy:
    return listing_policy("orders")


def reviews_policy() -> ListingPolicy:
    return listing_policy("reviews")


def users_policy() -> ListingPolicy:
    return listing_policy("users", private_fields=ACCOUNT_PRIVATE_FIELDS)
