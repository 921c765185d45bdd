"""
Initialize the database: create all tables and the bootstrap admin account.
Run with: python -m scripts.init_db
"""

import asyncio

from asha_assist.database import Base, engine
from asha_assist.main import seed_admin_user
from asha_assist.models import MedicalRecord, Patient, User, Visit  # noqa: F401


async def init():
    print("Creating database tables...")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await seed_admin_user()
    print("All tables created successfully.")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init())
