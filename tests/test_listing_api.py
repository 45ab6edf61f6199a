from datetime import timedelta
from uuid import uuid4

from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.security import create_access_token
from app.db.session import get_db
from app.main import app
from app.models.menu_item import MenuItem
from app.models.restaurant import CONFIRM_STATUS_PENDING, CONFIRM_STATUS_REJECTED
from tests.base import DatabaseTestCase, ReadCounter

API = settings.API_PREFIX


class ListingApiTests(DatabaseTestCase):
    def setUp(self):
        super().setUp()

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self):
        self.client.close()
        app.dependency_overrides.clear()

    @staticmethod
    def _auth_headers(role: str, sub=None) -> dict[str, str]:
        token = create_access_token(sub or uuid4(), role)
        return {"Authorization": f"Bearer {token}"}

    def test_public_restaurant_listing_only_shows_confirmed(self):
        self.add_restaurant("Pizza Corner")
        self.add_restaurant("Koshary El Tahrir")
        self.add_restaurant("Green Bowl", confirm_status=CONFIRM_STATUS_PENDING)
        self.add_restaurant("Late Night Grill", confirm_status=CONFIRM_STATUS_REJECTED)

        response = self.client.get(f"{API}/restaurants", params={"confirm_status": "none", "sort": "name"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "success")
        self.assertEqual(body["totalSize"], 0)

        body = self.client.get(f"{API}/restaurants", params={"sort": "name"}).json()
        self.assertEqual(body["totalSize"], 2)
        self.assertEqual([r["name"] for r in body["restaurants"]], ["Koshary El Tahrir", "Pizza Corner"])
        self.assertNotIn("password_hash", body["restaurants"][0])

    def test_invalid_pagination_is_a_fail_envelope(self):
        response = self.client.get(f"{API}/restaurants?page=page&limit=abc")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["status"], "fail")
        self.assertIn("page", response.json()["message"])

    def test_unsupported_operator_is_a_fail_envelope(self):
        response = self.client.get(f"{API}/restaurants?name[regex]=^P")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"status": "fail", "message": 'Unsupported filter operator "regex" in "name[regex]"'})

    def test_invalid_filter_value_is_a_fail_envelope(self):
        response = self.client.get(f"{API}/restaurants?created_at[gte]=yesterday")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["status"], "fail")

    def test_menu_items_of_confirmed_restaurant(self):
        restaurant = self.add_restaurant("Pizza Corner")
        self.add_menu_items(restaurant.id, [5, 10, 30, 50, 60])

        response = self.client.get(
            f"{API}/restaurants/{restaurant.id}/menu-items?price[gte]=10&price[lte]=50&sort=-price&fields=name,price"
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["totalSize"], 3)
        self.assertEqual([item["price"] for item in body["menu_items"]], [50.0, 30.0, 10.0])
        self.assertEqual(set(body["menu_items"][0]), {"id", "name", "price"})

    def test_menu_items_default_page_size_is_resource_specific(self):
        restaurant = self.add_restaurant("Pizza Corner")
        self.add_menu_items(restaurant.id, range(1, 26))
        body = self.client.get(f"{API}/restaurants/{restaurant.id}/menu-items").json()
        self.assertEqual(body["totalSize"], 25)
        self.assertEqual(len(body["menu_items"]), 25)

    def test_menu_items_parse_errors_come_before_any_read(self):
        restaurant = self.add_restaurant("Pizza Corner")
        counter = ReadCounter(self.engine)
        try:
            response = self.client.get(f"{API}/restaurants/{restaurant.id}/menu-items?limit=0")
        finally:
            counter.close()
        self.assertEqual(response.status_code, 400)
        self.assertEqual(counter.reads, 0)

    def test_unconfirmed_restaurant_is_hidden(self):
        restaurant = self.add_restaurant("Green Bowl", confirm_status=CONFIRM_STATUS_PENDING)
        response = self.client.get(f"{API}/restaurants/{restaurant.id}/menu-items")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["status"], "fail")
        self.assertEqual(self.client.get(f"{API}/restaurants/{restaurant.id}").status_code, 403)

    def test_unknown_restaurant_is_404(self):
        self.assertEqual(self.client.get(f"{API}/restaurants/{uuid4()}").status_code, 404)
        self.assertEqual(self.client.get(f"{API}/restaurants/not-an-id/reviews").status_code, 404)

    def test_single_restaurant_and_menu_item(self):
        restaurant = self.add_restaurant("Pizza Corner")
        other = self.add_restaurant("Koshary El Tahrir")
        item = self.add_menu_items(restaurant.id, [95])[0]

        body = self.client.get(f"{API}/restaurants/{restaurant.id}").json()
        self.assertEqual(body["restaurant"]["name"], "Pizza Corner")
        self.assertNotIn("password_hash", body["restaurant"])

        body = self.client.get(f"{API}/restaurants/{restaurant.id}/menu-items/{item.id}").json()
        self.assertEqual(body["menu_item"]["price"], 95.0)
        response = self.client.get(f"{API}/restaurants/{other.id}/menu-items/{item.id}")
        self.assertEqual(response.status_code, 404)

    def test_restaurant_reviews_listing(self):
        restaurant = self.add_restaurant("Pizza Corner")
        user = self.add_user("Mona")
        for rating in (5, 2, 4):
            self.add_review(restaurant.id, user.id, rating)
        body = self.client.get(f"{API}/restaurants/{restaurant.id}/reviews?rating[gte]=4&sort=-rating").json()
        self.assertEqual(body["totalSize"], 2)
        self.assertEqual([r["rating"] for r in body["reviews"]], [5, 4])

    def test_incoming_orders_are_scoped_to_the_restaurant(self):
        mine = self.add_restaurant("Pizza Corner")
        other = self.add_restaurant("Koshary El Tahrir")
        user = self.add_user("Mona")
        self.add_order(mine.id, user.id, 100, delivered=True)
        self.add_order(mine.id, user.id, 40)
        self.add_order(other.id, user.id, 70)
        headers = self._auth_headers("RESTAURANT", sub=mine.id)

        body = self.client.get(f"{API}/restaurants/me/orders", headers=headers).json()
        self.assertEqual(body["totalSize"], 2)

        body = self.client.get(f"{API}/restaurants/me/orders?delivered=false", headers=headers).json()
        self.assertEqual(body["totalSize"], 1)
        self.assertEqual(body["orders"][0]["total_price"], 40.0)

        body = self.client.get(f"{API}/restaurants/me/orders?restaurant_id={other.id}", headers=headers).json()
        self.assertEqual(body["totalSize"], 0)
        self.assertEqual(body["orders"], [])

    def test_incoming_reviews_and_profile(self):
        mine = self.add_restaurant("Pizza Corner")
        user = self.add_user("Mona")
        self.add_review(mine.id, user.id, 3, comment="ok")
        headers = self._auth_headers("RESTAURANT", sub=mine.id)

        body = self.client.get(f"{API}/restaurants/me/reviews", headers=headers).json()
        self.assertEqual(body["totalSize"], 1)
        body = self.client.get(f"{API}/restaurants/me", headers=headers).json()
        self.assertEqual(body["user"]["id"], str(mine.id))
        self.assertNotIn("password_hash", body["user"])

    def test_user_orders_are_scoped_to_the_user(self):
        restaurant = self.add_restaurant("Pizza Corner")
        mona = self.add_user("Mona")
        omar = self.add_user("Omar")
        self.add_order(restaurant.id, mona.id, 10)
        self.add_order(restaurant.id, omar.id, 20)
        body = self.client.get(f"{API}/users/me/orders", headers=self._auth_headers("USER", sub=mona.id)).json()
        self.assertEqual(body["totalSize"], 1)
        self.assertEqual(body["orders"][0]["user_id"], str(mona.id))

    def test_admin_restaurant_requests_queue(self):
        self.add_restaurant("Pizza Corner")
        self.add_restaurant("Green Bowl", confirm_status=CONFIRM_STATUS_PENDING)
        headers = self._auth_headers("ADMIN")
        body = self.client.get(f"{API}/admins/restaurant-requests", headers=headers).json()
        self.assertEqual(body["totalSize"], 1)
        self.assertEqual(body["restaurants"][0]["name"], "Green Bowl")

        body = self.client.get(f"{API}/admins/restaurant-requests?confirm_status=true", headers=headers).json()
        self.assertEqual(body["totalSize"], 0)

    def test_admin_users_listing_hides_password_hash(self):
        self.add_user("Mona")
        body = self.client.get(f"{API}/admins/users?fields=-phone", headers=self._auth_headers("ADMIN")).json()
        self.assertEqual(body["totalSize"], 1)
        self.assertNotIn("password_hash", body["users"][0])
        self.assertNotIn("phone", body["users"][0])

    def test_role_checks(self):
        response = self.client.get(f"{API}/admins/users")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["status"], "fail")
        response = self.client.get(f"{API}/admins/users", headers=self._auth_headers("USER"))
        self.assertEqual(response.status_code, 403)
        response = self.client.get(f"{API}/restaurants/me/orders", headers={"Authorization": "Bearer nonsense"})
        self.assertEqual(response.status_code, 401)

    def test_persistence_failure_is_an_error_envelope_without_query_details(self):
        from sqlalchemy import create_engine
        from sqlalchemy.orm import sessionmaker

        empty_engine = create_engine("sqlite+pysqlite:///:memory:")
        EmptySession = sessionmaker(bind=empty_engine)

        def broken_get_db():
            db = EmptySession()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = broken_get_db
        try:
            response = self.client.get(f"{API}/restaurants?name=Pizza")
        finally:
            empty_engine.dispose()
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"status": "error", "message": "Internal server error"})

    def test_out_of_range_page_is_a_fail_envelope(self):
        response = self.client.get(f"{API}/restaurants?page=99999999999999999999")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["status"], "fail")

    def test_out_of_range_filter_values(self):
        restaurant = self.add_restaurant("Pizza Corner")
        user = self.add_user("Mona")
        self.add_review(restaurant.id, user.id, 4)

        for query in ("created_at=9999-12-31", "created_at[ne]=9999-12-31"):
            with self.subTest(query=query):
                response = self.client.get(f"{API}/restaurants?{query}")
                self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get(f"{API}/restaurants?created_at=9999-12-31").json()["totalSize"], 0)
        self.assertEqual(self.client.get(f"{API}/restaurants?created_at[ne]=9999-12-31").json()["totalSize"], 1)

        response = self.client.get(f"{API}/restaurants/{restaurant.id}/reviews?rating=99999999999999999999")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["status"], "fail")

    def test_sort_on_json_column_falls_back_to_creation_order(self):
        mine = self.add_restaurant("Pizza Corner")
        user = self.add_user("Mona")
        first = self.add_order(mine.id, user.id, 10)
        second = self.add_order(mine.id, user.id, 20)
        headers = self._auth_headers("RESTAURANT", sub=mine.id)
        body = self.client.get(f"{API}/restaurants/me/orders?sort=-items", headers=headers).json()
        self.assertEqual([o["id"] for o in body["orders"]], [str(first.id), str(second.id)])

    def test_expired_token_is_rejected(self):
        token = create_access_token(uuid4(), "ADMIN", expires_delta=timedelta(minutes=-5))
        response = self.client.get(f"{API}/admins/users", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(response.status_code, 401)


class MenuItemWriteApiTests(DatabaseTestCase):
    def setUp(self):
        super().setUp()

        def override_get_db():
            db = self.SessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)
        self.mine = self.add_restaurant("Pizza Corner")
        self.other = self.add_restaurant("Koshary El Tahrir")
        self.headers = {"Authorization": f"Bearer {create_access_token(self.mine.id, 'RESTAURANT')}"}

    def tearDown(self):
        self.client.close()
        app.dependency_overrides.clear()

    def _stored(self, item_id):
        with self.SessionLocal() as db:
            return db.get(MenuItem, item_id)

    def test_add_menu_item_belongs_to_the_caller(self):
        response = self.client.post(
            f"{API}/restaurants/me/menu-items",
            json={
                "name": "Margherita",
                "price": "95.00",
                "ingredients": ["tomato", "mozzarella"],
                "restaurant_id": str(self.other.id),
            },
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body["status"], "created")
        self.assertEqual(body["menu_item"]["restaurant_id"], str(self.mine.id))
        self.assertEqual(body["menu_item"]["price"], 95.0)
        self.assertTrue(body["menu_item"]["available_for_sale"])

        listing = self.client.get(f"{API}/restaurants/{self.mine.id}/menu-items").json()
        self.assertEqual(listing["totalSize"], 1)

    def test_add_menu_item_validates_payload(self):
        for payload in ({"name": "Margherita"}, {"name": "", "price": 10}, {"name": "Margherita", "price": -1}):
            with self.subTest(payload=payload):
                response = self.client.post(f"{API}/restaurants/me/menu-items", json=payload, headers=self.headers)
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["status"], "fail")

    def test_writes_require_restaurant_role(self):
        user_headers = {"Authorization": f"Bearer {create_access_token(uuid4(), 'USER')}"}
        response = self.client.post(
            f"{API}/restaurants/me/menu-items", json={"name": "Margherita", "price": 10}, headers=user_headers
        )
        self.assertEqual(response.status_code, 403)
        response = self.client.post(f"{API}/restaurants/me/menu-items", json={"name": "Margherita", "price": 10})
        self.assertEqual(response.status_code, 401)

    def test_update_applies_only_allowed_properties(self):
        item = self.add_menu_items(self.mine.id, [30])[0]
        response = self.client.patch(
            f"{API}/restaurants/me/menu-items/{item.id}",
            json={"price": "35.50", "available_for_sale": False, "restaurant_id": str(self.other.id)},
            headers=self.headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "updated"})
        stored = self._stored(item.id)
        self.assertEqual(float(stored.price), 35.5)
        self.assertFalse(stored.available_for_sale)
        self.assertEqual(stored.restaurant_id, self.mine.id)
        self.assertEqual(stored.name, "item-1")

    def test_update_rejects_null_for_required_properties(self):
        item = self.add_menu_items(self.mine.id, [30])[0]
        response = self.client.patch(
            f"{API}/restaurants/me/menu-items/{item.id}", json={"price": None}, headers=self.headers
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(float(self._stored(item.id).price), 30.0)

    def test_foreign_menu_item_cannot_be_changed(self):
        item = self.add_menu_items(self.other.id, [30])[0]
        response = self.client.patch(
            f"{API}/restaurants/me/menu-items/{item.id}", json={"price": 1}, headers=self.headers
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["message"], "You don't have permission to update this menu item")
        response = self.client.delete(f"{API}/restaurants/me/menu-items/{item.id}", headers=self.headers)
        self.assertEqual(response.status_code, 403)
        self.assertIsNotNone(self._stored(item.id))

    def test_unknown_menu_item_is_404(self):
        for item_id in (uuid4(), "not-an-id"):
            with self.subTest(item_id=item_id):
                response = self.client.delete(f"{API}/restaurants/me/menu-items/{item_id}", headers=self.headers)
                self.assertEqual(response.status_code, 404)
                self.assertEqual(response.json()["status"], "fail")

    def test_delete_menu_item(self):
        item = self.add_menu_items(self.mine.id, [30])[0]
        response = self.client.delete(f"{API}/restaurants/me/menu-items/{item.id}", headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "deleted"})
        self.assertIsNone(self._stored(item.id))
