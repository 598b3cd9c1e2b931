"""Data-access layer over the hosted database."""

from breaddie.repositories.base import BaseRepository
from breaddie.repositories.card import CardRepository
from breaddie.repositories.deck import DeckRepository
from breaddie.repositories.profile import ProfileRepository
from breaddie.repositories.recipe import RecipeRepository
from breaddie.repositories.story import StoryRepository
from breaddie.repositories.study_session import StudySessionRepository

__all__ = [
    "BaseRepository",
    "CardRepository",
    "DeckRepository",
    "ProfileRepository",
    "RecipeRepository",
    "StoryRepository",
    "StudySessionRepository",
]
