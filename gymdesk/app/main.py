# GymDesk backend entrypoint: FastAPI app for the studio management console.

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gymdesk.app.api import auth
from gymdesk.app.api import dashboard
from gymdesk.app.api import members
from gymdesk.app.api import sessions
from gymdesk.app.api import setup
from gymdesk.app.api import subscription_plans
from gymdesk.app.api import subscriptions
from gymdesk.app.api import trainers
from gymdesk.app.api import users
from gymdesk.app.core.dev_seed import ensure_default_dev_accounts
from gymdesk.app.core.logging import configure_logging
from gymdesk.app.core.settings import get_settings
from gymdesk.app.db.base import Base
from gymdesk.app.db.session import SessionLocal, engine

settings = get_settings()
configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.APP_NAME, version=settings.API_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(members.router)
app.include_router(trainers.router)
app.include_router(sessions.router)
app.include_router(subscriptions.router)
app.include_router(subscription_plans.router)
app.include_router(users.router)
app.include_router(dashboard.router)
app.include_router(setup.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/")
def read_root():
    return {"app": "GymDesk backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def prepare_store():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        ensure_default_dev_accounts(db)
    finally:
        db.close()
