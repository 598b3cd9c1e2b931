"""Business logic services orchestrating domain operations."""

from breaddie.services.auth import AuthService
from breaddie.services.flashcards import CardReviewService, DeckService, StudySessionService
from breaddie.services.llm import LLMService
from breaddie.services.profile import ProfileService
from breaddie.services.prompts import PromptRenderer
from breaddie.services.recipe import RecipeService
from breaddie.services.story_generation import StoryGenerationService

__all__ = [
    "AuthService",
    "CardReviewService",
    "DeckService",
    "LLMService",
    "ProfileService",
    "PromptRenderer",
    "RecipeService",
    "StoryGenerationService",
    "StudySessionService",
]
