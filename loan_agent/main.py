"""
Loan Voice Agent - Scripted Hindi/English loan sales conversations
Main FastAPI Application
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .routes import router as agent_router
from .session import session_manager

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ============ LIFESPAN ============

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.app_name} starting up")
    logger.info(f"Agent persona: {settings.agent_name} @ {settings.brand_name}")
    logger.info(f"URL: http://{settings.host}:{settings.port}")

    yield

    active = await session_manager.get_active_sessions()
    logger.info(f"{settings.app_name} shutting down ({len(active)} conversations dropped)")


# ============ APP SETUP ============

app = FastAPI(
    title=settings.app_name,
    description="Scripted Hindi/English loan sales voice agent",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(agent_router)


@app.get("/health")
async def health():
    return {
        "status": "healthy",
        "app": settings.app_name,
        "active_conversations": len(await session_manager.get_active_sessions()),
    }


def run():
    """Entry point for the `loan-agent` console script"""
    import uvicorn
    uvicorn.run("loan_agent.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    run()
