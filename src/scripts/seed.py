import asyncio
from datetime import date
from uuid import UUID
from sqlalchemy import select
from src.database import AsyncSessionLocal
from src.auth.models import User
from src.auth.security import get_password_hash
# Subscription and Document are imported so every relationship resolves
from src.subscriptions.models import Subscription, SubscriptionPlan
from src.subscriptions.service import SubscriptionService
from src.patents.models import Patent
from src.patents.service import PatentService
from src.patents.schemas import PatentCreate
from src.documents.models import Document
from src.prior_art.models import PriorArt
from src.scripts.init_db import init_models

DEMO_USER_ID = UUID("00000000-0000-0000-0000-000000000002")
DEMO_EMAIL = "inventor@demo.dev"
DEMO_PASSWORD = "demo-password"

DEMO_PATENTS = [
    PatentCreate(
        title="Self-levelling drone landing pad",
        description="A landing pad for unmanned aerial vehicles with actuated legs that keep the "
                    "surface level on uneven ground, and visual markers for camera guided descent.",
        inventors=["Alice Moreau", "Ken Ito"],
        jurisdictions=["US", "EP"],
        claims=[
            "A landing pad comprising a platform, three actuated legs and an inclinometer.",
            "The landing pad of claim 1, wherein the platform carries a fiducial marker.",
        ],
        technical_field="Unmanned aerial vehicles",
    ),
    PatentCreate(
        title="Low-power soil moisture sensor network",
        description="Battery powered capacitive soil sensors that relay readings over a mesh network "
                    "and sleep between 15 minute sampling windows.",
        inventors=["Alice Moreau"],
        jurisdictions=["US"],
        claims=["A sensor node comprising a capacitive probe, a radio and a sleep controller."],
        technical_field="Agricultural sensing",
    ),
]

PRIOR_ART = [
    PriorArt(
        patent_number="US10000001B2",
        title="Landing platform for vertical take-off aircraft",
        abstract="A platform for vertical take-off aircraft with adjustable legs and a level sensor.",
        claims=["A platform comprising adjustable legs and a level sensor."],
        publication_date=date(2018, 6, 19),
    ),
    PriorArt(
        patent_number="EP3000002A1",
        title="Visual marker for precision drone landing",
        abstract="Fiducial markers printed on a landing surface guide a drone camera during descent.",
        claims=["A landing surface carrying a fiducial marker readable by an aerial camera."],
        publication_date=date(2016, 3, 30),
    ),
    PriorArt(
        patent_number="US9000003B1",
        title="Wireless mesh of soil sensors",
        abstract="Soil moisture sensors communicate over a wireless mesh network to a gateway.",
        claims=["A system comprising soil moisture sensors and a mesh gateway."],
        publication_date=date(2015, 4, 14),
    ),
]


async def seed_data():
    await init_models()

    async with AsyncSessionLocal() as session:
        # 1. Create User
        user = await session.get(User, DEMO_USER_ID)
        if not user:
            print("Creating Demo User...")
            user = User(
                id=DEMO_USER_ID,
                email=DEMO_EMAIL,
                hashed_password=get_password_hash(DEMO_PASSWORD),
                first_name="Alice",
                last_name="Moreau",
                company="Demo Labs",
            )
            session.add(user)
            await session.flush()
            await SubscriptionService(session).open_subscription(user, SubscriptionPlan.PRO)
            await session.commit()

        # 2. Create Patents
        existing = await session.execute(select(Patent.title).where(Patent.owner_id == user.id))
        titles = set(existing.scalars().all())
        service = PatentService(session)
        for patent_in in DEMO_PATENTS:
            if patent_in.title not in titles:
                print(f"Creating patent: {patent_in.title}")
                await service.create_patent(patent_in, user)

        # 3. Prior-art corpus
        existing = await session.execute(select(PriorArt.patent_number))
        numbers = set(existing.scalars().all())
        for record in PRIOR_ART:
            if record.patent_number not in numbers:
                session.add(record)
        await session.commit()
        print("Seeding complete.")

if __name__ == "__main__":
    asyncio.run(seed_data())
