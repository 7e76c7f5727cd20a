import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from hardware_pos.core.config import settings
from hardware_pos.core.database import init_db
from hardware_pos.core.logging_config import configure_logging
from hardware_pos.routers import sale, inventory

logger = logging.getLogger(__name__)


# ---------------------------------------------------------
# 1. LIFESPAN MANAGER
# ---------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    # --- STARTUP ---
    configure_logging(settings.LOG_LEVEL)
    logger.info("Initialization started")
    client = await init_db()

    yield

    # --- SHUTDOWN ---
    client.close()
    logger.info("System shutting down")


# ---------------------------------------------------------
# 2. APP INITIALIZATION
# ---------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    lifespan=lifespan,
    description="Sale posting and inventory ledger API for a hardware store"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sale.router, prefix="/sales", tags=["Sales"])
app.include_router(inventory.router, prefix="/inventory", tags=["Inventory Ledger"])


@app.get("/", tags=["System"])
async def root():
    return {
        "system": settings.APP_NAME,
        "status": "Online",
        "documentation": "/docs"
    }


@app.get("/health", tags=["System"])
async def health_check():
    return {"status": "ok"}
