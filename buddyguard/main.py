import logging
import os

from dotenv import load_dotenv

load_dotenv()  # load .env from the project root (or current working directory)

# Store and classifier settings are read at import time, so .env must be loaded first
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("buddyguard")

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from buddyguard.core.incident_workflow import IncidentWorkflow
from buddyguard.core.liveness import LIVENESS_INTERVAL, LivenessMonitor
from buddyguard.core.session import SessionRegistry
from buddyguard.core.staff_directory import StaffDirectory
from buddyguard.routers import dashboard, incidents, session, staff
from buddyguard.services.classifier import AdvisoryClassifier, build_classifier
from buddyguard.services.data_store import DataStore


def create_app(
    store: Optional[DataStore] = None,
    classifier: Optional[AdvisoryClassifier] = None,
    liveness_interval: float = LIVENESS_INTERVAL,
) -> FastAPI:
    if store is None:
        store = DataStore()
    if classifier is None:
        classifier = build_classifier()
    if not getattr(store, "configured", True):
        logger.warning("SUPABASE_URL / SUPABASE_ANON_KEY not set; reads will serve fallback data and writes will fail.")

    monitor = LivenessMonitor(store, interval=liveness_interval)
    sessions = SessionRegistry(lambda: IncidentWorkflow(store, classifier))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        monitor.start()
        try:
            yield
        finally:
            await monitor.stop()
            sessions.close_all()

    app = FastAPI(title="BuddyGuard Incident API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.store = store
    app.state.classifier = classifier
    app.state.liveness = monitor
    app.state.sessions = sessions
    app.state.staff = StaffDirectory(store)

    app.include_router(session.router)
    app.include_router(incidents.router)
    app.include_router(dashboard.router)
    app.include_router(staff.router)

    @app.get("/health")
    async def health_check() -> dict:
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
