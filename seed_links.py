# seed_links.py
"""
Seed the configured backend with demo categories and links.

    python seed_links.py --backend relational --categories 10 --links 50
"""
import argparse
import asyncio
import json
import time
from datetime import datetime, timezone

from linkdir_platform.storage import get_storage


def now_iso():
    return datetime.now(timezone.utc).isoformat()


async def seed(args):
    storage = get_storage(args.backend)
    await storage.connect()
    ok = 0
    try:
        await storage.ensure_schema()
        with open(args.out, "w", encoding="utf-8") as outf:
            for i in range(args.categories):
                category = await storage.add_category(
                    {"name": f"{args.prefix} {i}", "slug": f"{args.prefix.lower()}-{i}", "icon": "folder"}
                )
                for j in range(args.links):
                    link = await storage.add_link({
                        "title": f"Link {i}.{j}",
                        "url": f"https://example.com/{i}/{j}",
                        "categoryId": category.id,
                        "description": f"Seeded link {j} of {category.name}",
                    })
                    ok += 1
                    outf.write(json.dumps({"category": category.id, "link": link.id}) + "\n")
    finally:
        await storage.disconnect()
    return ok


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--backend", default=None, help="relational | document (default: LINKDIR_DATABASE_TYPE)")
    ap.add_argument("--categories", type=int, default=5, help="categories to insert")
    ap.add_argument("--links", type=int, default=20, help="links per category")
    ap.add_argument("--prefix", default="Demo", help="category name prefix")
    ap.add_argument("--out", default="seeded_links.jsonl")
    args = ap.parse_args()

    start_iso = now_iso()
    t0 = time.perf_counter()
    ok = asyncio.run(seed(args))
    dt = time.perf_counter() - t0

    total = args.categories * args.links
    print(f"START: {start_iso}")
    print(f"END:   {now_iso()}")
    print(f"TOTAL: {dt:.3f} s")
    print(f"INSERTED: {args.categories} categories, {ok}/{total} links")
    if dt > 0:
        print(f"RPS: {ok/dt:.1f} links/s")


if __name__ == "__main__":
    main()
