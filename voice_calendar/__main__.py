"""Allow ``python -m voice_calendar``."""

import asyncio

from .main import main


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
