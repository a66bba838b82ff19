# prizebot/scripts/seed_games.py
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from prizebot.database.session import Database
from prizebot.services.seed import seed_games


async def main(path: Path, database_url: str) -> None:
    data = json.loads(path.read_text(encoding="utf-8"))

    db = Database(database_url)
    await db.init_models()
    try:
        async with db.session() as session:
            report = await seed_games(session, data)
    finally:
        await db.close()

    print(f"✅ Seeded coupons: {', '.join(report.coupons_created) or '-'}")
    print(f"✅ Seeded games: {', '.join(map(str, report.games_created)) or '-'}")


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    parser = argparse.ArgumentParser(description="Seed coupons and mini-games from a JSON file.")
    parser.add_argument("path", type=Path, help="JSON file, see games.example.json")
    parser.add_argument(
        "--database-url",
        default=os.environ.get("DATABASE_URL") or "sqlite+aiosqlite:///./prizebot.db",
    )
    args = parser.parse_args()

    asyncio.run(main(args.path, args.database_url))
