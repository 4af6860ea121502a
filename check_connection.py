# check_connection.py
"""
Connectivity check for the configured storage backend.

    LINKDIR_DATABASE_TYPE=relational LINKDIR_DATABASE_URL=postgresql://... python check_connection.py
    python check_connection.py --backend document

Never prints the connection string itself.
"""
import argparse
import asyncio
import logging
import sys

from linkdir_platform.storage import StorageError, get_storage


async def check(backend):
    storage = get_storage(backend)
    print(f"Check: connecting to {storage.backend_name} backend...")
    try:
        await storage.connect()
        print("Check success: connected.")
        categories = await storage.get_categories()
        print(f"Check: {len(categories)} categories visible.")
        return True
    except StorageError as e:
        print(f"Check error: {type(e).__name__}: {e}", file=sys.stderr)
        return False
    finally:
        await storage.disconnect()
        print("Check: connection closed.")


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--backend", default=None, help="relational | document (default: LINKDIR_DATABASE_TYPE)")
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        ok = asyncio.run(check(args.backend))
    except StorageError as e:  # unknown backend tag
        print(f"Check error: {e}", file=sys.stderr)
        ok = False
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
