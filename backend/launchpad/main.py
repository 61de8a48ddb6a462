import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from tortoise.contrib.fastapi import RegisterTortoise

from launchpad.api import health, sale_router
from launchpad.api.sale_endpoints.common import sale_error_handler
from launchpad.core.config import Settings, settings
from launchpad.core.errors import SaleError
from launchpad.sale import InMemoryPriceFeed, NativePriceSource, TokenSale
from launchpad.sale.assets import InMemoryToken, NativeBank
from launchpad.services.dia import dia_client
from launchpad.services.recorder import EventRecorder
from launchpad.workers.price_feed import price_feed_loop

logger = logging.getLogger(__name__)


def build_sale(config: Settings, feed: InMemoryPriceFeed) -> TokenSale:
    """Sale engine on an in-memory chain configured from settings."""
    return TokenSale(
        owner=config.owner_address,
        usdc=InMemoryToken(config.usdc_address, "USDC", decimals=6),
        usdt=InMemoryToken(config.usdt_address, "USDT", decimals=6),
        native=NativeBank(),
        price_source=NativePriceSource(
            feed,
            config.native_price_key,
            max_age_seconds=config.oracle_max_age_seconds,
        ),
        address=config.sale_address,
    )


def create_app(
    config: Settings = settings,
    sale: Optional[TokenSale] = None,
    price_feed: Optional[InMemoryPriceFeed] = None,
) -> FastAPI:
    price_feed = price_feed or InMemoryPriceFeed()
    sale = sale or build_sale(config, price_feed)
    recorder = EventRecorder()
    sale.events.subscribe(recorder)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup/shutdown events."""
        async with RegisterTortoise(
            app,
            config=config.tortoise_config,
            generate_schemas=config.generate_schemas,
        ):
            logger.info(f"Recording sale events under run {recorder.run_id}")
            worker_task = None
            if config.price_feed_enabled:
                worker_task = asyncio.create_task(price_feed_loop(price_feed, dia_client))
                logger.info("Started native price feed worker")
            yield
            if worker_task is not None:
                worker_task.cancel()
                try:
                    await worker_task
                except asyncio.CancelledError:
                    pass

    app = FastAPI(
        title=config.app_name,
        description="""
    Launchpad Token Sale API

    This API provides endpoints for:
    - Registering timed token sale projects (owner only)
    - Buying project tokens with USDC, USDT or the native currency
    - Querying allocations, committed amounts and funds raised per project
    - Reading the oracle price used for native currency purchases

    ## Purchase Flow

    1. Owner requests `GET /api/v1/sale/admin-message` and signs it with their wallet
    2. Owner calls `POST /api/v1/sale/projects` with the project and the signature
    3. Once the project window opens, buyers sign a `GET /api/v1/sale/buyer-message`
       and call `buy-stable` or `buy-native` with that signature
    4. Requests above the remaining supply are partially filled; the last one sells the project out
    5. Funds go straight to the project's payout address
    """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.sale = sale
    app.state.price_feed = price_feed
    app.state.recorder = recorder

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SaleError, sale_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(sale_router.router, prefix=config.api_v1_prefix)

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": config.app_name,
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/health",
            "api": f"{config.api_v1_prefix}/sale",
        }

    return app


app = create_app()
