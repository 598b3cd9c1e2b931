from __future__ import annotations

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from breaddie.api.routes.cards import get_card_review_service
from breaddie.api.routes.decks import get_deck_service
from breaddie.api.routes.study_sessions import get_study_session_service
from breaddie.core.auth import get_current_user
from breaddie.core.errors import ErrorCode, NotFoundError
from breaddie.main import app
from breaddie.schemas.flashcards import StudySessionEnd, StudySessionStart

USER_ID = uuid.uuid4()
NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _session_stub() -> SimpleNamespace:
    return SimpleNamespace(commit=AsyncMock(), flush=AsyncMock())


class StubDeckService:
    def __init__(self) -> None:
        self.session = _session_stub()
        self.deck = SimpleNamespace(
            id=uuid.uuid4(),
            name="Baking verbs",
            description=None,
            slug="baking-verbs",
            category="language",
            difficulty_level=2,
            is_public=True,
            card_count=40,
            study_count=3,
            created_by=None,
            created_at=NOW,
        )

    async def list_decks(self, user_id: uuid.UUID, *, limit: int = 50, offset: int = 0) -> tuple[list, int]:
        return [self.deck], 1


class StubCardReviewService:
    def __init__(self) -> None:
        self.session = _session_stub()

    async def review_card(self, user_id: uuid.UUID, card_id: uuid.UUID, quality: int) -> SimpleNamespace:
        if quality == 0:
            raise NotFoundError(code=ErrorCode.CARD_NOT_FOUND, message="Card not found.")
        return SimpleNamespace(
            card_id=card_id,
            ease_factor=2.6,
            interval=6,
            repetitions=2,
            next_review=NOW,
            card_state="review",
            total_reviews=2,
            last_reviewed=NOW,
        )


class StubStudySessionService:
    def __init__(self) -> None:
        self.session = _session_stub()
        self.started: list[StudySessionStart] = []
        self.ended: list[StudySessionEnd] = []

    def _row(self, **overrides: object) -> SimpleNamespace:
        values: dict[str, object] = {
            "id": uuid.uuid4(),
            "user_id": USER_ID,
            "deck_id": None,
            "session_type": "mixed",
            "start_time": NOW,
            "end_time": None,
            "cards_studied": 0,
            "new_cards": 0,
            "review_cards": 0,
            "correct_answers": 0,
            "total_time": None,
            "average_response_time": None,
        }
        values.update(overrides)
        return SimpleNamespace(**values)

    async def start_session(self, user_id: uuid.UUID, payload: StudySessionStart) -> SimpleNamespace:
        self.started.append(payload)
        return self._row(session_type=payload.session_type, deck_id=payload.deck_id)

    async def end_session(
        self,
        user_id: uuid.UUID,
        session_id: uuid.UUID,
        payload: StudySessionEnd,
    ) -> SimpleNamespace:
        self.ended.append(payload)
        return self._row(id=session_id, end_time=NOW, cards_studied=payload.cards_studied, total_time=300)


@pytest.fixture()
def deck_service_stub() -> StubDeckService:
    return StubDeckService()


@pytest.fixture()
def card_service_stub() -> StubCardReviewService:
    return StubCardReviewService()


@pytest.fixture()
def study_service_stub() -> StubStudySessionService:
    return StubStudySessionService()


@pytest.fixture(autouse=True)
def override_dependencies(
    deck_service_stub: StubDeckService,
    card_service_stub: StubCardReviewService,
    study_service_stub: StubStudySessionService,
) -> None:
    async def _user_override() -> SimpleNamespace:
        return SimpleNamespace(id=USER_ID)

    app.dependency_overrides[get_current_user] = _user_override
    app.dependency_overrides[get_deck_service] = lambda: deck_service_stub
    app.dependency_overrides[get_card_review_service] = lambda: card_service_stub
    app.dependency_overrides[get_study_session_service] = lambda: study_service_stub

    yield

    for dependency in (get_current_user, get_deck_service, get_card_review_service, get_study_session_service):
        app.dependency_overrides.pop(dependency, None)


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")


@pytest.mark.asyncio
async def test_list_decks_returns_page() -> None:
    async with _client() as client:
        response = await client.get("/api/decks", params={"limit": 10})

    assert response.status_code == 200
    payload = response.json()
    assert payload["total"] == 1
    assert payload["limit"] == 10
    assert payload["offset"] == 0
    assert payload["data"][0]["name"] == "Baking verbs"


@pytest.mark.asyncio
async def test_list_decks_requires_authentication() -> None:
    app.dependency_overrides.pop(get_current_user, None)

    async with _client() as client:
        response = await client.get("/api/decks")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "AUTH_FAILED"


@pytest.mark.asyncio
async def test_review_card_commits_and_returns_schedule(card_service_stub: StubCardReviewService) -> None:
    card_id = uuid.uuid4()

    async with _client() as client:
        response = await client.post(f"/api/cards/{card_id}/review", json={"quality": 4})

    assert response.status_code == 200
    payload = response.json()
    assert payload["card_id"] == str(card_id)
    assert payload["interval"] == 6
    card_service_stub.session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_review_card_rejects_quality_out_of_range() -> None:
    async with _client() as client:
        response = await client.post(f"/api/cards/{uuid.uuid4()}/review", json={"quality": 6})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_review_unknown_card_returns_404(card_service_stub: StubCardReviewService) -> None:
    async with _client() as client:
        response = await client.post(f"/api/cards/{uuid.uuid4()}/review", json={"quality": 0})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "CARD_NOT_FOUND"
    card_service_stub.session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_start_and_end_study_session(study_service_stub: StubStudySessionService) -> None:
    async with _client() as client:
        started = await client.post("/api/study-sessions", json={"session_type": "review"})
        session_id = started.json()["id"]
        ended = await client.post(
            f"/api/study-sessions/{session_id}/end",
            json={"cards_studied": 12, "correct_answers": 10},
        )

    assert started.status_code == 201
    assert started.json()["session_type"] == "review"
    assert ended.status_code == 200
    assert ended.json()["total_time"] == 300
    assert study_service_stub.ended[0].cards_studied == 12
    assert study_service_stub.session.commit.await_count == 2


@pytest.mark.asyncio
async def test_start_study_session_rejects_unknown_type() -> None:
    async with _client() as client:
        response = await client.post("/api/study-sessions", json={"session_type": "speedrun"})

    assert response.status_code == 422
