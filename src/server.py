"""Protean Engine runner for the orderdesk domain.

Starts the Engine, which processes events asynchronously in production:
projectors keep the live board current and the side-effect handler runs
refunds and notifications after each committed status change.

Usage:
    python src/server.py
    python src/server.py --test-mode   # Drain pending messages and exit
"""

import argparse
import asyncio

from protean.server.engine import Engine

from orderdesk.domain import orderdesk


async def run(test_mode: bool = False):
    orderdesk.init()
    engine = Engine(orderdesk, test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="OrderDesk Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
