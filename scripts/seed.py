"""
Seed a sample provider with a week of weekday slots (09:00–17:00).

Usage (from the repository root, after `alembic upgrade head` in backend/):
    python scripts/seed.py
"""

import os
import sys, pathlib
from datetime import date, timedelta

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "backend"))

from app.database import SessionLocal
from app.models.generated import Providers
from app.services.slots import generate_slots

PROVIDER_NAME = os.getenv("SEED_PROVIDER_NAME", "Dr. Ahmad Ali")
PROVIDER_SLUG = os.getenv("SEED_PROVIDER_SLUG", "dr-ahmad-ali")
PROVIDER_PHONE = os.getenv("SEED_PROVIDER_PHONE", "+963912345678")

START_HOUR = 9
END_HOUR = 17
DAYS = 7


def get_or_create_provider(db) -> Providers:
    provider = db.query(Providers).filter(Providers.slug == PROVIDER_SLUG).first()
    if provider:
        return provider

    provider = Providers(
        name=PROVIDER_NAME,
        slug=PROVIDER_SLUG,
        phone=PROVIDER_PHONE,
        whatsapp_number=PROVIDER_PHONE,
    )
    db.add(provider)
    db.commit()
    db.refresh(provider)
    return provider


def main():
    db = SessionLocal()
    try:
        provider = get_or_create_provider(db)

        today = date.today()
        total = 0
        for offset in range(DAYS):
            day = today + timedelta(days=offset)
            # Skip weekends
            if day.weekday() >= 5:
                continue
            total += len(generate_slots(db, provider.id, day, START_HOUR, END_HOUR))

        print("✅ Seed completed!")
        print(f"Provider: {provider.name} (id={provider.id})")
        print(f"Slots: {total}")
        print(f"Public page: /d/{provider.slug}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
