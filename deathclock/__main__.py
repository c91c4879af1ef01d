#!/usr/bin/env python3
"""Entry point for running the countdown as a terminal indicator.

Usage:
    python -m deathclock [config.yaml|config.json]
    python -m deathclock --set-date <date> [config.yaml|config.json]
"""

import asyncio
import sys

from common import get_config
from deathclock.errors import ConfigError, InvalidDateInput
from deathclock.service import CountdownService


USAGE = (
    "Usage: python -m deathclock [config.yaml|config.json]\n"
    "       python -m deathclock --set-date <date> [config.yaml|config.json]"
)


def _draw(text):
    sys.stdout.write(f"\r\033[K{text}")
    sys.stdout.flush()


async def run_indicator(config):
    """Redraw the label every tick until cancelled, then tear down."""
    service = CountdownService(config=config, on_update=_draw)
    await service.start()
    try:
        await asyncio.Event().wait()
    finally:
        await service.stop()


async def set_date(config, text):
    """Validate and persist a new target date. Returns the exit status."""
    service = CountdownService(
        config=config,
        notify=lambda title, body: print(f"{title}: {body}"),
    )
    await service.store.load()
    try:
        service.set_target_date(text)
    except InvalidDateInput:
        return 1
    finally:
        await service.store.close()
    print(service.date_label())
    return 0


def main(argv=None):
    """Main entry point for the countdown CLI."""
    args = list(sys.argv[1:] if argv is None else argv)

    date_text = None
    if args and args[0] == "--set-date":
        if len(args) < 2:
            print(USAGE)
            return 2
        date_text = args[1]
        args = args[2:]

    if len(args) > 1 or (args and args[0] in ("-h", "--help")):
        print(USAGE)
        return 2

    try:
        config = get_config(args[0] if args else None)
    except ConfigError as e:
        print(f"Error loading config: {e}")
        return 1

    if date_text is not None:
        return asyncio.run(set_date(config, date_text))

    try:
        asyncio.run(run_indicator(config))
    except KeyboardInterrupt:
        print("\nShutting down...")
    return 0


if __name__ == '__main__':
    sys.exit(main())
