"""OrderDesk load testing — Locust entry point.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Board refresh storm only:
    locust -f loadtests/locustfile.py BoardStormUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py OrderDeskUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.order_desk import BoardStormUser, OrderDeskUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Extracts the API error body so the log shows "status: Cannot transition
    from pending to ready" instead of just "400".
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the final board counters when the test ends."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    if not environment.host:
        return
    try:
        resp = requests.get(f"{environment.host}/orders/board", params={"window": "today"}, timeout=5)
        resp.raise_for_status()
        stats = resp.json()["stats"]
        print("\n[LOADTEST] Board counters for today:")
        for name, value in stats.items():
            print(f"  {name}: {value}")
        print()
    except requests.RequestException as e:
        print(f"[LOADTEST] Could not fetch the board: {e}\n")
