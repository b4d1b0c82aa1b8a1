# address_verification/main.py
from datetime import datetime, timezone
from fastapi import FastAPI
from contextlib import asynccontextmanager

import logging

from address_verification.configs import env, configs
from address_verification.routes import (
    address,
    address_management,
    changes,
    persons,
    public,
)
from address_verification.services import background
from address_verification.services.address_seed import seed_addresses
from address_verification.services.db import (
    close_database_client,
    get_database_client,
    init_database,
)
from fastapi.middleware.cors import CORSMiddleware


# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

app_config = configs.get("app", {})


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Handles startup and shutdown events for the application.
    Connects to MongoDB, initializes Beanie and starts the address seed.
    """
    logger.info("Application startup initiated...")
    try:
        client = await get_database_client()
        await init_database(client[env.get("MONGO_DB")])
        logger.info("MongoDB connection and Beanie initialization successful.")
    except Exception as e:
        logger.error(f"Failed to connect to MongoDB or initialize Beanie: {e}")
        raise

    # Seeding can take a while on an empty cache; do not hold up startup
    background.spawn(seed_addresses(), name="address-seed")

    yield

    logger.info("Application shutdown initiated...")
    in_flight = background.running_tasks()
    if in_flight:
        logger.warning(
            f"{len(in_flight)} background task(s) still running; they stop with the process."
        )
    await close_database_client()
    logger.info("MongoDB connection closed.")


app = FastAPI(
    title=app_config.get("project_name", "Adres Doğrulama"),
    debug=app_config.get("debug_mode", False),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_config.get("cors_origins", []),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Admin routers (persons, changes, address-management) are expected to sit
# behind the deployment's authentication layer.
app.include_router(public.router, prefix="/public", tags=["Public Form"])
app.include_router(address.router, prefix="/address", tags=["Address Hierarchy"])
app.include_router(changes.router, prefix="/changes", tags=["Change Requests"])
app.include_router(persons.router, prefix="/persons", tags=["Persons"])
app.include_router(
    address_management.router,
    prefix="/address-management",
    tags=["Address Management"],
)


@app.get("/health")
async def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
