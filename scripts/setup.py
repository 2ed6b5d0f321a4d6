#!/usr/bin/env python3
"""Migrate the database and seed the reference data the marketplace needs on day one."""

import asyncio
import logging
import sys
from pathlib import Path

# Add the server directory to the Python path
server_dir = Path(__file__).parent.parent / "server"
sys.path.insert(0, str(server_dir))

from alembic import command  # noqa: E402
from alembic.config import Config  # noqa: E402
from sqlalchemy import func, select  # noqa: E402

from arah_umroh.core.database import async_session_factory, close_db  # noqa: E402
from arah_umroh.models import (  # noqa: E402
    Checklist,
    ChecklistCategory,
    ManasikCategory,
    ManasikGuide,
    PrayerCategory,
    ShopCategory,
    SubscriptionPlan,
)
from arah_umroh.services.settings_service import DEFAULT_SETTINGS, SettingsService  # noqa: E402

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CHECKLISTS = [
    ("Paspor berlaku minimal 7 bulan", ChecklistCategory.DOKUMEN, "H-30"),
    ("Fotokopi KTP dan KK", ChecklistCategory.DOKUMEN, "H-30"),
    ("Buku kuning vaksin meningitis", ChecklistCategory.KESEHATAN, "H-14"),
    ("Kain ihram dan sabuk", ChecklistCategory.PERLENGKAPAN, "H-7"),
    ("Obat-obatan pribadi", ChecklistCategory.KESEHATAN, "H-7"),
    ("Mempelajari manasik umroh", ChecklistCategory.MENTAL, "H-14"),
]

MANASIK_STEPS = [
    ("Ihram", "Berniat umroh dari miqat dengan mengenakan pakaian ihram."),
    ("Tawaf", "Mengelilingi Ka'bah tujuh kali dimulai dari Hajar Aswad."),
    ("Sa'i", "Berjalan antara bukit Shafa dan Marwah tujuh kali."),
    ("Tahallul", "Mencukur atau memotong sebagian rambut."),
]

PRAYER_CATEGORIES = ["Doa Perjalanan", "Doa Tawaf", "Doa Sa'i", "Doa Harian"]

SHOP_CATEGORIES = [("Perlengkapan Ihram", "perlengkapan-ihram"), ("Buku & Doa", "buku-doa"), ("Oleh-oleh", "oleh-oleh")]


def run_migrations() -> None:
    alembic_cfg = Config(str(server_dir / "db" / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(server_dir / "db" / "alembic"))
    command.upgrade(alembic_cfg, "head")


async def _is_empty(db, model) -> bool:
    return not await db.scalar(select(func.count()).select_from(model))


async def seed_reference_data() -> None:
    """Insert content and settings once; tables that already hold rows are left alone."""
    async with async_session_factory() as db:
        settings_service = SettingsService(db)
        for key, value in DEFAULT_SETTINGS.items():
            if await settings_service.get_setting_row(key) is None:
                await settings_service.set(key, value)
                logger.info(f"Seeded setting {key}")

        if await _is_empty(db, Checklist):
            for priority, (title, category, phase) in enumerate(CHECKLISTS):
                db.add(Checklist(title=title, category=category.value, phase=phase, priority=priority))
            logger.info(f"Seeded {len(CHECKLISTS)} checklist items")

        if await _is_empty(db, ManasikGuide):
            for order_index, (title, content) in enumerate(MANASIK_STEPS, start=1):
                db.add(ManasikGuide(
                    title=title,
                    content=content,
                    category=ManasikCategory.UMROH.value,
                    order_index=order_index,
                ))
            logger.info(f"Seeded {len(MANASIK_STEPS)} manasik steps")

        if await _is_empty(db, PrayerCategory):
            for priority, name in enumerate(PRAYER_CATEGORIES):
                db.add(PrayerCategory(name=name, priority=priority))

        if await _is_empty(db, ShopCategory):
            for sort_order, (name, slug) in enumerate(SHOP_CATEGORIES):
                db.add(ShopCategory(name=name, slug=slug, sort_order=sort_order))

        if await _is_empty(db, SubscriptionPlan):
            db.add(SubscriptionPlan(
                name="Jamaah Premium",
                description="Akses penuh panduan, doa dan pengingat",
                price_yearly=99000,
                features=["Panduan manasik lengkap", "Audio doa", "Tanpa iklan"],
            ))

        await db.commit()


async def main() -> None:
    try:
        # env.py drives its own event loop
        await asyncio.to_thread(run_migrations)
        logger.info("Database migrations completed")
        await seed_reference_data()
        logger.info("Setup completed successfully!")
    except Exception as e:
        logger.error(f"Setup failed: {e}")
        raise
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
