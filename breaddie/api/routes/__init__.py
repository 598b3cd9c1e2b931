"""Router aggregations for public endpoints."""

from fastapi import APIRouter

from breaddie.api.routes import (
    auth,
    cards,
    decks,
    health,
    profiles,
    recipes,
    stories,
    study_sessions,
)

# Health and browser-facing pages (no prefix)
root_router = APIRouter()
root_router.include_router(health.router, tags=["health"])
root_router.include_router(auth.callback_router)
root_router.include_router(profiles.page_router)
root_router.include_router(recipes.router)
root_router.include_router(stories.page_router)

# JSON actions with /api prefix
api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(profiles.router)
api_router.include_router(stories.router)
api_router.include_router(decks.router)
api_router.include_router(cards.router)
api_router.include_router(study_sessions.router)

__all__ = ["api_router", "root_router"]
