"""Story pipeline shapes: remote rows, model reply, and action payloads."""

from __future__ import annotations

import uuid
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class DueWord(BaseModel):
    """Row returned by ``get_user_words_for_story``."""

    model_config = ConfigDict(extra="ignore")

    word_id: uuid.UUID
    word: str
    definition: str | None = None
    contexts: list[Any] = Field(default_factory=list)
    mastery_score: float = 0.0

    @field_validator("contexts", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return value if value is not None else []

    @field_validator("mastery_score", mode="before")
    @classmethod
    def _none_as_zero(cls, value: object) -> object:
        return value if value is not None else 0.0


class NewsArticle(BaseModel):
    """Row returned by ``get_relevant_news``."""

    model_config = ConfigDict(extra="allow")

    article_id: uuid.UUID | str
    headline: str | None = None
    summary: str | None = None


class NewsIntegrationSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    include_news: bool | None = None
    preferred_categories: list[str] | None = None
    max_news_elements: int | None = None
    news_recency: str | None = None


class StoryPreferences(BaseModel):
    """The ``profiles.story_preferences`` document; every key is optional."""

    model_config = ConfigDict(extra="ignore")

    interests: list[str] | None = None
    attention_span: str | None = None
    cultural_background: str | None = None
    learning_goals: list[str] | None = None
    news_integration: NewsIntegrationSettings | None = None


class WordIntegrationPoint(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    word: str
    position: int | None = None
    integration_type: str | None = None
    context_strength: float | None = None
    learning_emphasis: str | None = None
    alternative_forms: list[str] = Field(default_factory=list)

    @field_validator("alternative_forms", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return value if value is not None else []


class NewsElement(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    headline: str | None = None
    source: str | None = None
    category: str | None = None
    relevance_score: float | None = None
    integrated_words: list[str] = Field(default_factory=list)
    context_adaptation: str | None = None


class ComprehensionQuestion(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    question: str
    question_type: str | None = None
    target_words: list[str] = Field(default_factory=list)
    correct_answer: str | None = None
    multiple_choice_options: list[str] = Field(default_factory=list)
    explanation: str | None = None
    difficulty_level: int | None = None

    @field_validator("target_words", "multiple_choice_options", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return value if value is not None else []


class GeneratedStory(BaseModel):
    """Story document the language model is asked to return."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    DEFAULTS: ClassVar[dict[str, Any]] = {
        "story_type": "narrative_adventure",
        "complexity_level": 2,
        "estimated_reading_time": 3,
    }

    title: str
    content: str
    story_type: str = "narrative_adventure"
    complexity_level: int = 2
    estimated_reading_time: int = 3
    word_integration_points: list[WordIntegrationPoint] = Field(default_factory=list)
    news_elements: list[NewsElement] = Field(default_factory=list)
    cultural_context: dict[str, Any] = Field(default_factory=dict)
    comprehension_questions: list[ComprehensionQuestion] = Field(default_factory=list)

    @field_validator("story_type", "complexity_level", "estimated_reading_time", mode="before")
    @classmethod
    def _falsy_as_default(cls, value: object, info: ValidationInfo) -> object:
        # The model sometimes sends "", 0 or null for fields it did not fill in.
        return value if value else cls.DEFAULTS[str(info.field_name)]

    @field_validator(
        "word_integration_points",
        "news_elements",
        "comprehension_questions",
        mode="before",
    )
    @classmethod
    def _null_list(cls, value: object) -> object:
        return value if value is not None else []

    @field_validator("cultural_context", mode="before")
    @classmethod
    def _null_mapping(cls, value: object) -> object:
        return value if value is not None else {}


class StoryGenerationResult(BaseModel):
    story: GeneratedStory
    session_id: uuid.UUID


class StoryGenerationFailure(BaseModel):
    error: str


class StoryGenerateRequest(BaseModel):
    max_words: int = Field(default=5, ge=1, le=20)
    include_news: bool = True


class StoryInteractionRequest(BaseModel):
    word_id: uuid.UUID | None = None
    interaction_type: str = Field(min_length=1, max_length=64)
    user_response: str | None = None
    correctness_score: float | None = Field(default=None, ge=0.0, le=1.0)
    time_taken: int | None = Field(default=None, ge=0)


class StoryCompleteRequest(BaseModel):
    comprehension_score: float = Field(ge=0.0, le=1.0)
    reading_time: int = Field(ge=0, description="Actual reading time in seconds.")
    difficulty_rating: int | None = Field(default=None, ge=1, le=5)
    relevance_rating: int | None = Field(default=None, ge=1, le=5)


__all__ = [
    "ComprehensionQuestion",
    "DueWord",
    "GeneratedStory",
    "NewsArticle",
    "NewsElement",
    "NewsIntegrationSettings",
    "StoryCompleteRequest",
    "StoryGenerateRequest",
    "StoryGenerationFailure",
    "StoryGenerationResult",
    "StoryInteractionRequest",
    "StoryPreferences",
    "WordIntegrationPoint",
]
