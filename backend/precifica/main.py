"""Precifica - FastAPI Application.

Restaurant cost management and menu pricing
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from precifica import __version__
from precifica.api import business, imports, insights, pricing, reports
from precifica.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.APP_NAME,
    description="Precifica - Restaurant cost management and menu pricing",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pricing.router)  # Markup, ideal prices, metrics
app.include_router(insights.router)  # Alerts and action center
app.include_router(imports.router)  # Sales import
app.include_router(business.router)  # Pricing context
app.include_router(reports.router)  # Monthly KPIs


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "service": settings.APP_NAME,
        "version": __version__,
        "status": "operational",
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    return {"status": "healthy"}
