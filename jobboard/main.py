# jobboard/main.py
import logging

from fastapi import FastAPI

from jobboard.api.v1.applications import router as applications_router
from jobboard.api.v1.conversations import router as conversations_router
from jobboard.api.v1.jobs import router as jobs_router
from jobboard.api.v1.notifications import router as notifications_router
from jobboard.api.v1.profiles import router as profiles_router
from jobboard.api.v1.templates import router as templates_router
from jobboard.core.config import settings
from jobboard.db.mongo import close_db, init_db

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(title="Job Board Messaging API")

app.include_router(conversations_router, prefix="/api/v1")
app.include_router(templates_router, prefix="/api/v1")
app.include_router(applications_router, prefix="/api/v1")
app.include_router(jobs_router, prefix="/api/v1")
app.include_router(profiles_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")


@app.get("/api/v1/healthz")
async def healthz():
    return {"status": "ok", "env": settings.APP_ENV}


@app.on_event("startup")
async def startup_event():
    await init_db()


@app.on_event("shutdown")
async def shutdown_event():
    close_db()
