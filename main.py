# main.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request

from config import settings
from db import create_client, ensure_indexes, get_db
from errors import setup_exception_handlers
from routers.auth import router as auth_router
from routers.products import router as products_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # connect once and store the client on app.state
    app.state.mongo = await create_client()
    await ensure_indexes(get_db(app.state.mongo))

    try:
        yield
    finally:
        app.state.mongo.close()
        logger.info("MongoDB client closed")

app = FastAPI(lifespan=lifespan, openapi_url="/openapi.json", docs_url="/docs", redoc_url="/redoc")
setup_exception_handlers(app)

app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(products_router, prefix="/products", tags=["products"])

@app.get("/health")
async def health(request: Request):
    await request.app.state.mongo.admin.command("ping")
    return {"status": "ok"}

@app.get("/ping")
async def ping():
    return {"ok": True}
