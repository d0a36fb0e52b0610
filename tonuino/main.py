"""
Tonuino tag toolkit: HTTP API.

FastAPI backend providing:
- Tonuino record decoding/encoding
- Reading and writing the Tonuino block through a PC/SC reader
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tonuino import config
from tonuino.api import tags

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting Tonuino tag toolkit (reader: {config.READER_NAME})")
    yield
    logger.info("Shutting down Tonuino tag toolkit")


app = FastAPI(
    title="Tonuino Tags",
    description="Read and write Tonuino MIFARE Classic tags",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(tags.router)


@app.get("/api/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)
