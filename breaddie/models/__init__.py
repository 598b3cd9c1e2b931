"""SQLAlchemy mirrors of the hosted database tables."""

from breaddie.models.card import Card, CardReview
from breaddie.models.deck import Deck
from breaddie.models.profile import Profile
from breaddie.models.recipe import Recipe, RecipeHeart, UserFavoriteRecipe
from breaddie.models.story import (
    StoryComprehensionQuestion,
    StorySession,
    StoryUserInteraction,
    StoryWordIntegration,
)
from breaddie.models.study_session import StudySession

__all__ = [
    "Card",
    "CardReview",
    "Deck",
    "Profile",
    "Recipe",
    "RecipeHeart",
    "StoryComprehensionQuestion",
    "StorySession",
    "StoryUserInteraction",
    "StoryWordIntegration",
    "StudySession",
    "UserFavoriteRecipe",
]
