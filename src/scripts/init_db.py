import asyncio
from src.database import engine, Base

# Import all models to ensure they are registered in Base.metadata
from src.auth.models import User
from src.subscriptions.models import Subscription
from src.patents.models import Patent, patent_jurisdictions
from src.documents.models import Document
from src.prior_art.models import PriorArt


async def init_models(drop: bool = False):
    async with engine.begin() as conn:
        if drop:
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    print("Database tables created.")

if __name__ == "__main__":
    asyncio.run(init_models())
