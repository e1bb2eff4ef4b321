"""
Load the demo users and deliveries into the configured storage
Run from the project root: python scripts/seed_demo_data.py
"""
import asyncio
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config.settings import settings
from app.core.middleware import setup_logging
from app.shared.storage import build_storage
from app.shared.storage.seed import seed_demo_data, DEMO_USERS, DEMO_PASSWORD


def main():
    setup_logging(settings.log_level)

    if settings.storage_backend != "database":
        print("⚠️ STORAGE_BACKEND is not 'database'; nothing would survive this script")
        return

    storage = build_storage(settings)
    storage.open()
    try:
        created = asyncio.run(seed_demo_data(storage))
    finally:
        storage.close()

    if created:
        print("\n📋 Demo credentials:")
        for user in DEMO_USERS:
            print(f"   👤 {user['role'].upper()}: {user['username']} / {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
