from __future__ import annotations

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from breaddie.core.errors import LLMParsingError
from breaddie.schemas.story import (
    DueWord,
    GeneratedStory,
    StoryGenerationFailure,
    StoryGenerationResult,
    StoryPreferences,
)
from breaddie.services.llm import TokenUsage
from breaddie.services.story_generation import (
    STORY_SESSION_NOT_FOUND,
    StoryGenerationService,
    build_prompt_context,
    match_word_id,
    news_recency_days,
    quality_from_score,
)

USER_ID = uuid.uuid4()
LEVAIN_ID = uuid.uuid4()
CRUMB_ID = uuid.uuid4()

WORD_ROWS = [
    {"word_id": LEVAIN_ID, "word": "Levain", "definition": "A sourdough starter", "contexts": None, "mastery_score": 0.125},
    {"word_id": CRUMB_ID, "word": "crumb", "definition": "Inner texture", "contexts": [], "mastery_score": None},
]

STORY_JSON: dict[str, Any] = {
    "title": "The Night Bakery",
    "content": "The levain rose while the crumb set.",
    "story_type": "",
    "complexity_level": 3,
    "estimated_reading_time": None,
    "word_integration_points": [
        {"word": "levain", "position": 1, "integration_type": "natural", "alternative_forms": None},
        {"word": "baguette", "position": 2},
    ],
    "comprehension_questions": [
        {
            "question": "What rose overnight?",
            "question_type": "multiple_choice",
            "target_words": ["Levain", "oven"],
            "correct_answer": "The levain",
            "multiple_choice_options": ["The levain", "The oven"],
        }
    ],
}


class StubStoryRepository:
    def __init__(self, word_rows: list[dict[str, Any]] | None = None) -> None:
        self.session = SimpleNamespace(commit=AsyncMock(), rollback=AsyncMock())
        self.word_rows = WORD_ROWS if word_rows is None else word_rows
        self.news_rows: list[dict[str, Any]] = [
            {"article_id": "news-1", "headline": "Flour prices fall", "summary": "Cheaper bread."}
        ]
        self.news_calls: list[dict[str, Any]] = []
        self.sessions: list[Any] = []
        self.integrations: list[Any] = []
        self.questions: list[Any] = []
        self.interactions: list[Any] = []
        self.completed: list[uuid.UUID] = []
        self.stored: dict[uuid.UUID, Any] = {}
        self.fail_integrations = False

    async def fetch_words_for_story(self, user_id: uuid.UUID, max_words: int) -> list[dict[str, Any]]:
        return self.word_rows[:max_words]

    async def fetch_relevant_news(self, **kwargs: Any) -> list[dict[str, Any]]:
        self.news_calls.append(kwargs)
        return self.news_rows

    async def add(self, instance: Any) -> Any:
        instance.id = uuid.uuid4()
        self.sessions.append(instance)
        return instance

    async def add_integrations(self, rows: list[Any]) -> list[Any]:
        if self.fail_integrations:
            raise OperationalError("INSERT", {}, Exception("insert failed"))
        self.integrations.extend(rows)
        return rows

    async def add_questions(self, rows: list[Any]) -> list[Any]:
        self.questions.extend(rows)
        return rows

    async def add_interaction(self, interaction: Any) -> Any:
        self.interactions.append(interaction)
        return interaction

    async def get_session(self, session_id: uuid.UUID) -> Any:
        return self.stored.get(session_id)

    async def mark_completed(self, session_id: uuid.UUID, **values: Any) -> bool:
        self.completed.append(session_id)
        return True


class StubProfileRepository:
    def __init__(self, preferences: dict[str, Any] | None = None) -> None:
        self.preferences = preferences or {}

    async def get_story_preferences(self, user_id: uuid.UUID) -> dict[str, Any]:
        return self.preferences


class StubCardRepository:
    def __init__(self, reviews: dict[uuid.UUID, Any] | None = None) -> None:
        self.reviews = reviews or {}
        self.qualities: list[int] = []

    async def get_review(self, card_id: uuid.UUID, user_id: uuid.UUID) -> Any:
        return self.reviews.get(card_id)

    async def calculate_next_review(self, *, current_ease: float, current_interval: int, quality: int) -> dict[str, Any]:
        self.qualities.append(quality)
        return {
            "new_ease": current_ease + 0.1,
            "new_interval": current_interval * 2 or 1,
            "next_review": datetime(2024, 6, 2, tzinfo=timezone.utc),
        }


class StubLLM:
    def __init__(self, reply: dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self.reply = STORY_JSON if reply is None else reply
        self.error = error
        self.calls: list[list[dict[str, str]]] = []

    async def chat_json(self, messages: list[dict[str, str]], response_model: type, **kwargs: Any) -> tuple[Any, TokenUsage]:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return response_model.model_validate(self.reply), TokenUsage(10, 20, 30)


def _service(
    story_repo: StubStoryRepository | None = None,
    profile_repo: StubProfileRepository | None = None,
    card_repo: StubCardRepository | None = None,
    llm: StubLLM | None = None,
) -> StoryGenerationService:
    return StoryGenerationService(
        story_repo or StubStoryRepository(),  # type: ignore[arg-type]
        profile_repo or StubProfileRepository(),  # type: ignore[arg-type]
        card_repo or StubCardRepository(),  # type: ignore[arg-type]
        llm or StubLLM(),  # type: ignore[arg-type]
    )


@pytest.mark.asyncio
async def test_generate_story_persists_session_and_matched_rows() -> None:
    story_repo = StubStoryRepository()
    llm = StubLLM()
    service = _service(story_repo=story_repo, llm=llm)

    result = await service.generate_adaptive_story(USER_ID, max_words=5)

    assert isinstance(result, StoryGenerationResult)
    assert result.story.story_type == "narrative_adventure"
    assert result.story.estimated_reading_time == 3
    session_row = story_repo.sessions[0]
    assert result.session_id == session_row.id
    assert session_row.target_words == [str(LEVAIN_ID), str(CRUMB_ID)]
    assert session_row.integrated_news_articles == ["news-1"]
    assert session_row.status == "active"
    assert [row.word_id for row in story_repo.integrations] == [LEVAIN_ID]
    assert story_repo.integrations[0].alternative_forms == []
    assert story_repo.questions[0].target_words == [str(LEVAIN_ID)]
    assert "Flour prices fall" in llm.calls[0][1]["content"]


@pytest.mark.asyncio
async def test_generate_story_without_due_words_skips_model() -> None:
    llm = StubLLM()
    service = _service(story_repo=StubStoryRepository(word_rows=[]), llm=llm)

    result = await service.generate_adaptive_story(USER_ID)

    assert result == StoryGenerationFailure(error="No words due for review found")
    assert llm.calls == []


@pytest.mark.asyncio
async def test_generate_story_reports_parse_failure() -> None:
    story_repo = StubStoryRepository()
    service = _service(story_repo=story_repo, llm=StubLLM(error=LLMParsingError("Invalid AI response format")))

    result = await service.generate_adaptive_story(USER_ID)

    assert isinstance(result, StoryGenerationFailure)
    assert result.error == "Failed to generate story: Invalid AI response format"
    assert story_repo.sessions == []


@pytest.mark.asyncio
async def test_generate_story_without_news_skips_lookup() -> None:
    story_repo = StubStoryRepository()
    service = _service(story_repo=story_repo)

    result = await service.generate_adaptive_story(USER_ID, include_news=False)

    assert isinstance(result, StoryGenerationResult)
    assert story_repo.news_calls == []
    assert story_repo.sessions[0].integrated_news_articles == []


@pytest.mark.asyncio
async def test_generate_story_tolerates_incomplete_news_rows() -> None:
    story_repo = StubStoryRepository()
    story_repo.news_rows = [
        {"article_id": "news-1", "headline": None, "summary": "Cheaper bread."},
        {"headline": "No id on this row"},
    ]
    llm = StubLLM()
    service = _service(story_repo=story_repo, llm=llm)

    result = await service.generate_adaptive_story(USER_ID)

    assert isinstance(result, StoryGenerationResult)
    assert story_repo.sessions[0].integrated_news_articles == ["news-1"]
    assert "Untitled: Cheaper bread." in llm.calls[0][1]["content"]
    assert "No id on this row" not in llm.calls[0][1]["content"]


@pytest.mark.asyncio
async def test_generate_story_accepts_numeric_answers() -> None:
    reply = {
        **STORY_JSON,
        "comprehension_questions": [
            {
                "question": "When did the bakery open?",
                "question_type": "short_answer",
                "target_words": ["levain"],
                "correct_answer": 1912,
                "multiple_choice_options": [1912, 1920],
            }
        ],
    }
    story_repo = StubStoryRepository()
    service = _service(story_repo=story_repo, llm=StubLLM(reply=reply))

    result = await service.generate_adaptive_story(USER_ID)

    assert isinstance(result, StoryGenerationResult)
    question = result.story.comprehension_questions[0]
    assert question.correct_answer == "1912"
    assert question.multiple_choice_options == ["1912", "1920"]
    assert story_repo.questions[0].correct_answer == "1912"


@pytest.mark.asyncio
async def test_news_preferences_shape_the_lookup() -> None:
    story_repo = StubStoryRepository()
    preferences = {
        "news_integration": {
            "preferred_categories": ["food"],
            "max_news_elements": 1,
            "news_recency": "today",
        }
    }
    service = _service(story_repo=story_repo, profile_repo=StubProfileRepository(preferences))

    await service.generate_adaptive_story(USER_ID)

    assert story_repo.news_calls == [
        {"categories": ["food"], "max_articles": 1, "days_back": 1, "complexity_level": 3}
    ]


@pytest.mark.asyncio
async def test_news_opt_out_in_preferences() -> None:
    story_repo = StubStoryRepository()
    preferences = {"news_integration": {"include_news": False}}
    service = _service(story_repo=story_repo, profile_repo=StubProfileRepository(preferences))

    await service.generate_adaptive_story(USER_ID)

    assert story_repo.news_calls == []


@pytest.mark.asyncio
async def test_integration_failure_keeps_story_session() -> None:
    story_repo = StubStoryRepository()
    story_repo.fail_integrations = True
    service = _service(story_repo=story_repo)

    result = await service.generate_adaptive_story(USER_ID)

    assert isinstance(result, StoryGenerationResult)
    assert len(story_repo.sessions) == 1
    assert len(story_repo.questions) == 1
    story_repo.session.rollback.assert_awaited()


@pytest.mark.asyncio
async def test_record_interaction_for_unknown_session() -> None:
    service = _service()

    status = await service.record_user_interaction(uuid.uuid4(), None, "word_lookup")

    assert status.success is False
    assert status.error == STORY_SESSION_NOT_FOUND


@pytest.mark.asyncio
async def test_record_interaction_rejects_other_users_session() -> None:
    story_repo = StubStoryRepository()
    session_id = uuid.uuid4()
    story_repo.stored[session_id] = SimpleNamespace(id=session_id, user_id=uuid.uuid4(), target_words=[])
    service = _service(story_repo=story_repo)

    status = await service.record_user_interaction(session_id, None, "word_lookup", user_id=USER_ID)

    assert status.error == STORY_SESSION_NOT_FOUND
    assert story_repo.interactions == []


@pytest.mark.asyncio
async def test_record_interaction_stores_row() -> None:
    story_repo = StubStoryRepository()
    session_id = uuid.uuid4()
    story_repo.stored[session_id] = SimpleNamespace(id=session_id, user_id=USER_ID, target_words=[])
    service = _service(story_repo=story_repo)

    status = await service.record_user_interaction(
        session_id, LEVAIN_ID, "question_answer", "The levain", 1.0, 12, user_id=USER_ID
    )

    assert status.success is True
    assert story_repo.interactions[0].word_id == LEVAIN_ID
    assert story_repo.interactions[0].time_taken == 12


@pytest.mark.asyncio
async def test_complete_session_updates_existing_reviews() -> None:
    story_repo = StubStoryRepository()
    session_id = uuid.uuid4()
    story_repo.stored[session_id] = SimpleNamespace(
        id=session_id,
        user_id=USER_ID,
        target_words=[str(LEVAIN_ID), str(CRUMB_ID)],
    )
    review = SimpleNamespace(
        ease_factor=2.5,
        interval=3,
        next_review=None,
        repetitions=1,
        total_reviews=4,
        last_reviewed=None,
        card_state="learning",
    )
    card_repo = StubCardRepository({LEVAIN_ID: review})
    service = _service(story_repo=story_repo, card_repo=card_repo)

    status = await service.complete_story_session(session_id, 0.85, 240, user_id=USER_ID)

    assert status.success is True
    assert story_repo.completed == [session_id]
    assert card_repo.qualities == [4]
    assert review.interval == 6
    assert review.repetitions == 2
    assert review.total_reviews == 5
    assert review.card_state == "review"


def test_quality_from_score_thresholds() -> None:
    assert quality_from_score(0.8) == 4
    assert quality_from_score(0.79) == 3
    assert quality_from_score(0.6) == 3
    assert quality_from_score(0.59) == 2


def test_match_word_id_is_case_insensitive_and_exact() -> None:
    words = [DueWord.model_validate(row) for row in WORD_ROWS]

    assert match_word_id(words, "LEVAIN") == LEVAIN_ID
    assert match_word_id(words, "crumbs") is None
    assert match_word_id(words, None) is None


def test_prompt_context_rounds_mastery_half_up() -> None:
    words = [DueWord.model_validate(row) for row in WORD_ROWS]

    context = build_prompt_context(words, [], StoryPreferences())

    assert [word["mastery_percent"] for word in context["words"]] == [13, 0]
    assert context["interests"] == "general"
    assert context["learning_goals"] == "vocabulary building"


def test_news_recency_days_defaults_to_a_week() -> None:
    assert news_recency_days("this_month") == 30
    assert news_recency_days(None) == 7
    assert news_recency_days("someday") == 7


def test_generated_story_fills_missing_defaults() -> None:
    story = GeneratedStory.model_validate({"title": "T", "content": "C", "complexity_level": 0})

    assert story.complexity_level == 2
    assert story.word_integration_points == []
