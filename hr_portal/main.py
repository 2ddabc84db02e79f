from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hr_portal.api.v1.router import api_router
from hr_portal.core.config import settings
from hr_portal.core.sharepoint import sharepoint_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    try:
        await sharepoint_client.initialize(settings)
    except Exception:
        logger.exception("Failed to initialize SharePointClient, continuing without SharePoint")
    yield
    await sharepoint_client.close()


app = FastAPI(
    title="HR Portal API",
    description="Attendance, leave, approvals and payroll on SharePoint lists",
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "HR Portal API"}
