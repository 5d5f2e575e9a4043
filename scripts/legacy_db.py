#!/usr/bin/env python3
"""Move data between the legacy ``db.json`` document and the database.

``import`` copies users, restaurants with their menus, orders and vouchers
into the configured database, skipping ids that already exist. ``export``
writes the database back out in the same camelCase layout.

Usage::

    python scripts/legacy_db.py import db.json
    python scripts/legacy_db.py export backup.json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from api.app.db import get_session, init_models  # noqa: E402
from api.app.legacy_store import export_document, import_document  # noqa: E402


async def main(command: str, path: Path) -> None:
    await init_models()
    async with get_session() as session:
        if command == "import":
            counts = await import_document(session, json.loads(path.read_text()))
            print(json.dumps(counts))
        else:
            doc = await export_document(session)
            path.write_text(json.dumps(doc, indent=2))
            print(f"wrote {path}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import or export db.json")
    parser.add_argument("command", choices=["import", "export"])
    parser.add_argument("path", type=Path, help="Path of the JSON document")
    args = parser.parse_args()
    asyncio.run(main(args.command, args.path))
