from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from orderdesk.middleware import RequestIdMiddleware
from orderdesk.db import SessionLocal, init_models
from orderdesk.config import settings
from orderdesk.errors import register_exception_handlers
from orderdesk.logging_config import configure_logging
from orderdesk.realtime.notifier import notifier
from orderdesk.services.archival import archival_scheduler

from orderdesk.routers import orders, bills, realtime

logger = logging.getLogger(__name__)

configure_logging()

app = FastAPI(title="OrderDesk API", version="0.1.0")

@app.on_event("startup")
async def startup():
    await init_models()
    if settings.RECOVER_ARCHIVAL_ON_STARTUP:
        async with SessionLocal() as db:
            await archival_scheduler.recover(db)
    logger.info(f"OrderDesk started ({settings.APP_ENV})")

@app.on_event("shutdown")
async def shutdown():
    await archival_scheduler.shutdown()
    await notifier.close_all()

# Middlewares
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(orders.router)
app.include_router(bills.router)
app.include_router(realtime.router)

@app.get("/healthz")
def healthz():
    return {"ok": True}
