import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, status
from foodadmin.core.db import init_db, close_db
from foodadmin.api.v1.menu import router as menu_router
from foodadmin.api.v1.inventory import router as inventory_router
from foodadmin.api.v1.orders import router as orders_router
from foodadmin.consumers.notifications import register_default_subscribers
from foodadmin.consumers.outbox_poller import run_outbox_poller
from foodadmin.core.config import LOG_LEVEL, PROJECT_NAME, RUN_OUTBOX_POLLER, VERSION
from foodadmin.core.exception_handlers import setup_exception_handlers
from foodadmin.events.bus import event_bus

logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handles startup and shutdown events."""
    log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
    await init_db() # Connect to DB and generate schemas
    register_default_subscribers(event_bus)

    poller = asyncio.create_task(run_outbox_poller(event_bus)) if RUN_OUTBOX_POLLER else None
    yield
    if poller:
        poller.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await poller
    await close_db()
    log.info(f"{PROJECT_NAME} stopped.")

app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    lifespan=lifespan,
    # Configure API documentation and paths
    docs_url="/docs",
    redoc_url="/redoc"
)

# Include routers for modular API structure
app.include_router(menu_router, prefix="/api/v1/menu", tags=["Menu Management"])
app.include_router(inventory_router, prefix="/api/v1/inventory", tags=["Inventory Management"])
app.include_router(orders_router, prefix="/api/v1/orders", tags=["Order Management"])


setup_exception_handlers(app)

@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok", "app_name": PROJECT_NAME}
