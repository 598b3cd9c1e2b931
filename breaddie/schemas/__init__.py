"""Public exports for Pydantic schemas."""

from __future__ import annotations

from .auth import SignInRequest, SignInResponse, SignUpRequest, SignUpResponse
from .flashcards import (
    CardReviewRequest,
    CardReviewResponse,
    DeckListResponse,
    DeckResponse,
    StudySessionEnd,
    StudySessionResponse,
    StudySessionStart,
)
from .profile import ProfilePage, ProfileResponse, ProfileUpdate, PublicProfile
from .recipe import RecipeAuthor, RecipeCard, RecipeHeartStats, RecipePage, RecipeResponse
from .story import (
    ComprehensionQuestion,
    DueWord,
    GeneratedStory,
    NewsArticle,
    StoryCompleteRequest,
    StoryGenerateRequest,
    StoryGenerationFailure,
    StoryGenerationResult,
    StoryInteractionRequest,
    StoryPreferences,
    WordIntegrationPoint,
)

__all__ = [
    "CardReviewRequest",
    "CardReviewResponse",
    "ComprehensionQuestion",
    "DeckListResponse",
    "DeckResponse",
    "DueWord",
    "GeneratedStory",
    "NewsArticle",
    "ProfilePage",
    "ProfileResponse",
    "ProfileUpdate",
    "PublicProfile",
    "RecipeAuthor",
    "RecipeCard",
    "RecipeHeartStats",
    "RecipePage",
    "RecipeResponse",
    "SignInRequest",
    "SignInResponse",
    "SignUpRequest",
    "SignUpResponse",
    "StoryCompleteRequest",
    "StoryGenerateRequest",
    "StoryGenerationFailure",
    "StoryGenerationResult",
    "StoryInteractionRequest",
    "StoryPreferences",
    "StudySessionEnd",
    "StudySessionResponse",
    "StudySessionStart",
    "WordIntegrationPoint",
]
