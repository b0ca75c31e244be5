"""
Checkout Service Application

Payer-facing checkout for payment links: card form validation,
tokenization and payment orchestration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import get_settings
from .routes import checkout_router

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Checkout service starting up...")
    logger.info(f"Backend URL: {settings.api_base_url}")
    logger.info(f"Tokenizer: {'simulated' if settings.uses_simulator else 'remote'}")

    yield

    logger.info("Checkout service shutting down...")
    from .routes.checkout import backend_client
    if backend_client:
        await backend_client.close()


app = FastAPI(
    title=settings.app_name,
    description="Checkout for payment links",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(checkout_router)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "checkout",
        "backend_configured": bool(settings.api_base_url),
        "tokenizer": "simulated" if settings.uses_simulator else "remote",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "paylink.checkout.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
