"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from certprep.admin.router import router as admin_router
from certprep.analytics.router import router as analytics_router
from certprep.auth.router import router as auth_router
from certprep.bookmarks.router import router as bookmarks_router
from certprep.certifications.router import router as certifications_router
from certprep.config import get_settings
from certprep.database import create_database
from certprep.exams.router import router as exams_router
from certprep.flashcards.router import router as flashcards_router
from certprep.gamification.router import router as gamification_router
from certprep.health.router import router as health_router
from certprep.import_export.router import router as import_export_router
from certprep.knowledge_areas.router import router as knowledge_areas_router
from certprep.middleware import setup_middleware
from certprep.progress.router import router as progress_router
from certprep.questions.router import router as questions_router
from certprep.redis_client import close_redis, create_redis
from certprep.subscriptions.router import router as subscriptions_router
from certprep.users.router import router as users_router
from certprep.webhooks.router import router as webhooks_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    app.state.db = create_database(settings)
    app.state.redis = create_redis(settings.redis_url)

    yield

    await app.state.db.dispose()
    await close_redis(app.state.redis)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="CertPrep API",
        description="Backend API for certification exam study: question bank, mock exams, progress and streaks",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(admin_router)
    app.include_router(certifications_router)
    app.include_router(knowledge_areas_router)
    app.include_router(questions_router)
    app.include_router(import_export_router)
    app.include_router(exams_router)
    app.include_router(progress_router)
    app.include_router(bookmarks_router)
    app.include_router(flashcards_router)
    app.include_router(gamification_router)
    app.include_router(analytics_router)
    app.include_router(subscriptions_router)
    app.include_router(webhooks_router)

    return app


app = create_app()
