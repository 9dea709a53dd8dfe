"""Script to create the initial admin user."""
import asyncio
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import settings
from app.database import AsyncSessionLocal, close_db
from app.services.bootstrap_service import ensure_default_admin


async def init_admin():
    """Create the admin account if it doesn't exist and promote it otherwise."""
    async with AsyncSessionLocal() as db:
        admin = await ensure_default_admin(db)

    print(f"✓ Admin user ready: {admin.email} ({admin.username})")
    if admin.email == settings.DEFAULT_ADMIN_EMAIL and settings.DEFAULT_ADMIN_PASSWORD == "adminpass":
        print("  Default password in use; set DEFAULT_ADMIN_PASSWORD in production.")
    await close_db()


if __name__ == "__main__":
    asyncio.run(init_admin())
