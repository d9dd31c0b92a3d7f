from locust import HttpUser, task, between, events
import random
import requests
import logging
from requests.exceptions import RequestException

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# The server must run with ENABLE_TEST_ROUTES=1 for /test/reset-db
ADMIN_HEADERS = {"X-User-Id": "1", "X-User-Role": "administrator"}
PRODUCT_COUNT = 10
# Low enough that concurrent orders drain it and exercise the 409 path
INITIAL_STOCK = 500


def reset_database(host):
    """Helper to reset the database by calling the test endpoint."""
    try:
        response = requests.post(f"{host}/test/reset-db")
        if response.status_code == 204:
            logger.info("Successfully reset database")
        else:
            logger.error(f"Failed to reset database: {response.status_code} - {response.text}")
    except RequestException as e:
        logger.error(f"Error resetting database: {str(e)}")
        raise


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Reset database and pre-populate products with stock before load test starts."""
    host = environment.host or "http://127.0.0.1:8000"
    logger.info("Resetting database before test...")
    reset_database(host)

    for i in range(PRODUCT_COUNT):
        payload = {
            "name": f"Load Test Gummy {i}",
            "flavor": random.choice(["strawberry", "lime", "cola", "peach"]),
            "size": "200g",
            "price": f"{9.99 + i:.2f}",
            "stock": INITIAL_STOCK,
        }
        try:
            resp = requests.post(f"{host}/products/", json=payload, headers=ADMIN_HEADERS, timeout=5)
            if resp.status_code in (201, 409):
                logger.info(f"Product {payload['name']} ready (stock: {INITIAL_STOCK})")
        except RequestException as e:
            logger.warning(f"Could not create product {payload['name']}: {e}")
    logger.info("Pre-population complete. Starting load test...")


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    """Check that no stock went negative, then clean up."""
    host = environment.host or "http://127.0.0.1:8000"
    try:
        resp = requests.get(f"{host}/stock/?limit=1000", headers=ADMIN_HEADERS, timeout=5)
        negative = [s for s in resp.json() if s["quantity"] < 0]
        if negative:
            logger.error(f"Stock went negative: {negative}")
        else:
            logger.info("All stock quantities are non-negative")
    except RequestException as e:
        logger.warning(f"Could not verify stock: {e}")
    logger.info("Test complete. Resetting database...")
    reset_database(host)
    logger.info("Cleanup complete.")


class WebsiteUser(HttpUser):
    wait_time = between(0.5, 2.0)

    def on_start(self):
        self.headers = {"X-User-Id": str(random.randint(100, 100000)), "X-User-Role": "user"}
        self.placed = []

    @task(6)
    def get_products(self):
        page = random.randint(1, 3)
        size = random.choice([5, 10, 20])
        with self.client.get(
            f"/products/?page={page}&size={size}", headers=self.headers, name="GET /products", catch_response=True
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"unexpected status {resp.status_code}")

    @task(3)
    def create_order_flow(self):
        with self.client.get(
            "/products/?page=1&size=10", headers=self.headers, name="GET /products/first", catch_response=True
        ) as r:
            if r.status_code != 200:
                r.failure(f"list failed {r.status_code}")
                return
            items = r.json().get("items") or []
        if not items:
            return

        chosen = random.sample(items, k=min(len(items), random.randint(1, 3)))
        order_payload = {"lines": [{"product_id": p["id"], "quantity": random.randint(1, 5)} for p in chosen]}
        with self.client.post(
            "/orders/", json=order_payload, headers=self.headers, name="POST /orders/", catch_response=True
        ) as order_resp:
            if order_resp.status_code == 201:
                self.placed.append(order_resp.json()["id"])
            elif order_resp.status_code in (409, 503):
                # Out of stock or database busy are expected under load
                order_resp.success()
            else:
                order_resp.failure(f"order creation unexpected status {order_resp.status_code}")

    @task(1)
    def cancel_order(self):
        if not self.placed:
            return
        order_id = self.placed.pop(random.randrange(len(self.placed)))
        with self.client.put(
            f"/orders/{order_id}/cancel", headers=ADMIN_HEADERS, name="PUT /orders/{id}/cancel", catch_response=True
        ) as resp:
            if resp.status_code not in (200, 423):
                resp.failure(f"cancel unexpected status {resp.status_code}")
