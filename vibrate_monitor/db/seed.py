"""
Optional development seeding script.
"""

import asyncio
import logging
import random
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from vibrate_monitor.core.constants import EQUIPMENT_CONFIG, PARAMETER_CONFIG, UNIT_CONFIG
from vibrate_monitor.core.database import AsyncSessionLocal, close_db, init_db
from vibrate_monitor.core.logs import configure_logging
from vibrate_monitor.handlers.auth import ensure_super_admin
from vibrate_monitor.models.reading import VibrationReading, reading_id
from vibrate_monitor.utils.time import days_ago, utc_today

logger = logging.getLogger(__name__)

SEED_DAYS = 14


def sample_parameters(rng: random.Random, drift: float) -> dict:
    """Plausible channel values; `drift` scales them to simulate wear."""
    values = {}
    for param in PARAMETER_CONFIG:
        base = param["maxValue"] * rng.uniform(0.1, 0.3)
        values[param["id"]] = round(min(param["maxValue"], base * drift), 2)
    return values


async def seed_data(seed: int = 42):
    """Seed database with two weeks of readings for every unit and asset."""
    await init_db()
    rng = random.Random(seed)
    today = utc_today()

    async with AsyncSessionLocal() as session:
        admin = await ensure_super_admin(session)

        created = 0
        for unit in UNIT_CONFIG:
            for equipment in EQUIPMENT_CONFIG:
                for offset in range(SEED_DAYS, -1, -1):
                    reading_date = days_ago(offset, today)
                    data_id = reading_id(unit["id"], equipment["id"], reading_date)
                    if await session.get(VibrationReading, data_id):
                        continue
                    # slow upward drift so the analysis view has something to flag
                    drift = 1.0 + (SEED_DAYS - offset) * 0.02
                    session.add(VibrationReading(
                        id=data_id,
                        unit=unit["id"],
                        equipment=equipment["id"],
                        date=reading_date,
                        parameters=sample_parameters(rng, drift),
                        notes="seed",
                        user_id=admin.id,
                        user_name=admin.name
                    ))
                    created += 1

        await session.commit()
        logger.info("Created %d sample readings", created)

    await close_db()


if __name__ == "__main__":
    configure_logging()
    asyncio.run(seed_data())
