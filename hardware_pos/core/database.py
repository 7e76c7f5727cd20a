import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from hardware_pos.core.config import settings
from hardware_pos.models.user import User
from hardware_pos.models.product import Product
from hardware_pos.models.sale import Sale
from hardware_pos.models.invoice_counter import InvoiceCounter

logger = logging.getLogger(__name__)

DOCUMENT_MODELS = [User, Product, Sale, InvoiceCounter]


async def init_db(client: Optional[AsyncIOMotorClient] = None):
    """Connect to MongoDB and initialize Beanie"""

    if client is None:
        client = AsyncIOMotorClient(settings.MONGODB_URL)

    await init_beanie(
        database=client[settings.DATABASE_NAME],
        document_models=DOCUMENT_MODELS,
    )

    logger.info("Beanie initialized with database '%s'", settings.DATABASE_NAME)
    return client
