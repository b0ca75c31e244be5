"""
Mock Backend Application

In-memory stand-in for the payment-link backend: link CRUD, card
tokenization through the PSP simulator, and simulated PSP routing.
"""

import os
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .errors import BackendError, backend_error_handler, validation_error_handler
from .routes import checkout_router, payment_links_router

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Mock backend starting up...")
    logger.info(f"Simulated PSP latency: {os.getenv('MOCK_BACKEND_LATENCY_SECONDS', '0.8')}s")
    yield
    logger.info("Mock backend shutting down...")


app = FastAPI(
    title="Mock Payment Link Backend",
    description="Simulated payment-link backend with a deterministic PSP tokenizer",
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

app.add_exception_handler(BackendError, backend_error_handler)
app.add_exception_handler(RequestValidationError, validation_error_handler)

app.include_router(payment_links_router)
app.include_router(checkout_router)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "mock-backend"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "paylink.mock_backend.main:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
    )
