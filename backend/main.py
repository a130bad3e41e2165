from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chromacut import __version__
from chromacut.api.v1 import router as v1_router
from chromacut.config import config
from chromacut.schemas import HealthResponse, MetricsResponse
from chromacut.utils.logging import configure_logging
from chromacut.utils.metrics import get_metrics

configure_logging()

app = FastAPI(
    title="Chromacut",
    description="Dominant color and palette extraction using median cut quantization",
    version=__version__
)

if config.allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"]
    )

app.include_router(v1_router)


@app.get("/healthz", response_model=HealthResponse)
def health_check():
    """Chromacut service health check."""
    return HealthResponse(ok=True, version=__version__, service="chromacut")


@app.get("/metrics", response_model=MetricsResponse)
def metrics_summary():
    """Get in-process extraction metrics."""
    return get_metrics().get_summary()


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Chromacut API",
        "version": __version__,
        "docs": "/docs"
    }
