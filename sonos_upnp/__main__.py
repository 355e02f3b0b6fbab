#!/usr/bin/env python3
"""Run the player service: ``python -m sonos_upnp``."""

import asyncio
import logging

from .players.sonos import main


def run():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    asyncio.run(main())


if __name__ == "__main__":
    run()
