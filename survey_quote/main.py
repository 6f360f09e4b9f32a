from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.responses import PlainTextResponse
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

from .calculators.registry import list_calculators
from .config import settings
from .dependencies import get_orchestrator
from .routers import quotes

logging.basicConfig(level=settings.LOG_LEVEL.upper())
logger = logging.getLogger("survey_quote")

app = FastAPI(
    title="Survey Quote Tool",
    description="Instant lidar and photogrammetry survey quotes",
    version="1.0.0",
)

origins = settings.cors_origins_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(quotes.router)

# Service area GeoJSON and other map assets for the client
data_path = os.path.join(os.path.dirname(__file__), "..", "data")
if os.path.exists(data_path):
    app.mount("/data", StaticFiles(directory=data_path), name="data")


@app.get("/", response_class=PlainTextResponse)
def root():
    return "Quote Tool Backend is running"


@app.get("/health")
def health():
    return {"status": "ok", "app": "survey-quote"}


@app.on_event("startup")
def load_collaborators():
    """Load the service area and notifiers up front so a bad config fails at boot."""
    get_orchestrator()
    logger.info("Backend ready on port %s (services: %s)", settings.PORT, ", ".join(list_calculators()))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
