"""Entry point for `python -m kibanagraph`.

Usage:
    python -m kibanagraph
    uv run python -m kibanagraph
"""

from __future__ import annotations

import asyncio

from kibanagraph.app import main

asyncio.run(main())
