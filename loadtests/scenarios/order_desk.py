"""Order desk load test scenarios.

Stateful SequentialTaskSet journeys that model staff working orders from
intake to a terminal state, plus board screens polling the live board.
Every status change fans out side effects (notifications, refunds,
scoreboard increments), so these journeys load the orchestrator as well as
the order store.
"""

import random

from locust import HttpUser, SequentialTaskSet, TaskSet, between, task

from loadtests.data_generators import (
    BUSINESS_IDS,
    cancellation_reason,
    courier_data,
    import_payload,
    staff_headers,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import BoardWatcherState, OrderDeskState


class _OrderJourney(SequentialTaskSet):
    order_type = "pickup"
    paid_by_card = True

    def on_start(self):
        self.state = OrderDeskState(order_type=self.order_type, headers=staff_headers())

    def _import(self):
        payload = import_payload(self.order_type, paid_by_card=self.paid_by_card)
        with self.client.post("/orders", json=payload, catch_response=True, name="POST /orders") as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order_id"]
                self.state.item_count = len(payload["document"]["items"])
            else:
                resp.failure(f"Import failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    def _check(self, position: int):
        with self.client.put(
            f"/orders/{self.state.order_id}/items/{position}/check",
            json={"checked": True},
            catch_response=True,
            name="PUT /orders/{id}/items/{position}/check",
        ) as resp:
            if resp.status_code == 200:
                self.state.checked_positions.append(position)
            else:
                resp.failure(f"Check item failed: {resp.status_code} — {extract_error_detail(resp)}")

    def _next_action(self):
        with self.client.post(
            f"/orders/{self.state.order_id}/next-action",
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders/{id}/next-action",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = resp.json()["status"]
            else:
                resp.failure(f"Next action failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    def _transition(self, target: str, **body):
        with self.client.post(
            f"/orders/{self.state.order_id}/transition",
            json={"target_status": target, **body},
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders/{id}/transition",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = resp.json()["status"]
            else:
                resp.failure(f"Transition to {target} failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()


class KitchenJourney(_OrderJourney):
    """Import -> check items (sometimes not all) -> accept -> prepare -> ready -> handed over -> complete.

    About a third of the orders are accepted with a shortfall, which
    triggers a partial refund and the shortfall notification.
    """

    def _hand_over(self):
        self._transition("delivered")

    @task
    def import_order(self):
        self._import()

    @task
    def check_items(self):
        positions = list(range(self.state.item_count))
        if len(positions) > 1 and random.random() < 0.33:
            positions.pop(random.randrange(len(positions)))
        for position in positions:
            self._check(position)

    @task
    def view_order(self):
        self.client.get(f"/orders/{self.state.order_id}", name="GET /orders/{id}")

    @task
    def accept(self):
        self._next_action()

    @task
    def start_preparing(self):
        self._next_action()

    @task
    def mark_ready(self):
        self._next_action()

    @task
    def hand_over(self):
        self._hand_over()

    @task
    def complete(self):
        self._transition("completed")

    @task
    def done(self):
        self.interrupt()


class TableServiceJourney(KitchenJourney):
    """Dine-in variant: the ready order is served at the table."""

    order_type = "dine_in"

    def _hand_over(self):
        self._next_action()


class DeliveryJourney(_OrderJourney):
    """Import -> accept -> prepare -> ready -> courier claim -> on the way -> delivered."""

    order_type = "delivery"

    @task
    def import_order(self):
        self._import()

    @task
    def check_all_items(self):
        for position in range(self.state.item_count):
            self._check(position)

    @task
    def accept(self):
        self._next_action()

    @task
    def start_preparing(self):
        self._next_action()

    @task
    def mark_ready(self):
        self._next_action()

    @task
    def claim(self):
        with self.client.post(
            f"/orders/{self.state.order_id}/courier",
            json=courier_data(),
            catch_response=True,
            name="POST /orders/{id}/courier",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Courier claim failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def send_out(self):
        self._transition("onTheWay")

    @task
    def deliver(self):
        self._transition("delivered")

    @task
    def done(self):
        self.interrupt()


class CancellationJourney(_OrderJourney):
    """Import -> check one item -> cancel with a reason. Cash orders, so no refund."""

    paid_by_card = False

    @task
    def import_order(self):
        self._import()

    @task
    def check_first_item(self):
        self._check(0)

    @task
    def cancel(self):
        self._transition("cancelled", cancellation_reason=cancellation_reason())

    @task
    def read_side_effects(self):
        self.client.get(f"/orders/{self.state.order_id}/side-effects", name="GET /orders/{id}/side-effects")

    @task
    def done(self):
        self.interrupt()


class BoardWatcher(TaskSet):
    """A board screen polling the live board for one business."""

    def on_start(self):
        self.state = BoardWatcherState(
            business_id=random.choice(BUSINESS_IDS),
            window=random.choice(["today", "today", "week", "month"]),
        )

    @task(5)
    def refresh(self):
        with self.client.get(
            "/orders/board",
            params={"window": self.state.window, "business_id": self.state.business_id},
            catch_response=True,
            name="GET /orders/board",
        ) as resp:
            if resp.status_code == 200:
                self.state.refreshes += 1
            else:
                resp.failure(f"Board refresh failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task(1)
    def ready_column(self):
        self.client.get(
            "/orders/board",
            params={"window": "today", "business_id": self.state.business_id, "status": "ready"},
            name="GET /orders/board?status",
        )

    @task(1)
    def stop(self):
        self.interrupt()


class OrderDeskUser(HttpUser):
    """Realistic order desk traffic.

    Weights model a shift: mostly counter orders, regular dine-in and
    delivery traffic, occasional cancellations, and board screens
    refreshing throughout.
    """

    wait_time = between(0.5, 3.0)
    tasks = {
        KitchenJourney: 6,
        TableServiceJourney: 3,
        DeliveryJourney: 3,
        CancellationJourney: 1,
        BoardWatcher: 4,
    }


class BoardStormUser(HttpUser):
    """Many screens refreshing at once against a modest write load."""

    wait_time = between(0.1, 0.5)
    tasks = {
        BoardWatcher: 10,
        KitchenJourney: 1,
    }
