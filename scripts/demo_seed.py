#!/usr/bin/env python3
"""Seed the demo riders and the launch voucher.

The API does this on startup when ``seed_demo_data`` is enabled; this helper
is for databases served with seeding switched off.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from api.app.db import get_session, init_models  # noqa: E402
from api.app.seed import seed_demo_data  # noqa: E402


async def main() -> None:
    await init_models()
    async with get_session() as session:
        added = await seed_demo_data(session)
    print(f"added {added} rows")


if __name__ == "__main__":
    asyncio.run(main())
