"""Test the Trivia game and the question retrieval."""

import asyncio
import random
from typing import Any

import httpx
import pytest

from gamecord.core import GameContext, UpstreamDataError
from gamecord.games.trivia import API_URL, Trivia, TriviaData, fetch_trivia
from tests.constants import PLAYER
from tests.fakes import EventLog, FakeTransport, click, wait_until

QUESTION = {
    "type": "multiple",
    "difficulty": "easy",
    "category": "Science%3A%20Computers",
    "question": "What%20does%20%22CPU%22%20stand%20for%3F",
    "correct_answer": "Central%20Processing%20Unit",
    "incorrect_answers": [
        "Central%20Process%20Unit",
        "Computer%20Personal%20Unit",
        "Central%20Processor%20Unit",
    ],
}

STATIC = {
    "question": "Is Python a snake?",
    "difficulty": "easy",
    "category": "Animals",
    "answer": "True",
    "options": ["True", "False"],
}


def client_for(
    status: int,
    payload: Any,
    requests: list[httpx.Request] | None = None,
) -> httpx.AsyncClient:
    """Build a client answering every request with the same payload."""

    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(status, json=payload)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_multiple(rng: random.Random) -> None:
    """Test the decoding of a multiple choice question."""
    requests: list[httpx.Request] = []
    client = client_for(200, {"response_code": 0, "results": [QUESTION]}, requests)
    async with client:
        trivia = await fetch_trivia(client, "multiple", "easy", rng)
    assert trivia.question == 'What does "CPU" stand for?'
    assert trivia.category == "Science: Computers"
    assert trivia.answer == "Central Processing Unit"
    assert sorted(trivia.options) == sorted(
        [
            "Central Process Unit",
            "Computer Personal Unit",
            "Central Processor Unit",
            "Central Processing Unit",
        ]
    )
    (request,) = requests
    assert str(request.url).startswith(API_URL)
    assert request.url.params["type"] == "multiple"
    assert request.url.params["difficulty"] == "easy"


@pytest.mark.asyncio
async def test_fetch_single(rng: random.Random) -> None:
    """Test that true/false questions have fixed options."""
    question = {
        **QUESTION,
        "correct_answer": "False",
        "incorrect_answers": ["True"],
    }
    requests: list[httpx.Request] = []
    client = client_for(200, {"response_code": 0, "results": [question]}, requests)
    async with client:
        trivia = await fetch_trivia(client, "single", "hard", rng)
    assert trivia.options == ["True", "False"]
    assert trivia.answer == "False"
    (request,) = requests
    assert request.url.params["type"] == "boolean"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "payload", "match"),
    [
        (200, {"response_code": 5, "results": []}, "Rate limited"),
        (200, {"response_code": 1, "results": []}, "No trivia question"),
        (500, {"error": "boom"}, "Unable to fetch"),
        (200, ["not", "an", "object"], "Unable to fetch"),
    ],
)
async def test_fetch_failures(
    rng: random.Random, status: int, payload: Any, match: str
) -> None:
    """Test that every upstream failure raises the same error."""
    async with client_for(status, payload) as client:
        with pytest.raises(UpstreamDataError, match=match):
            await fetch_trivia(client, "multiple", "easy", rng)


@pytest.mark.asyncio
async def test_upstream_failure_ends_session(
    context: GameContext, transport: FakeTransport, rng: random.Random
) -> None:
    """Test that a missing question ends the session with a notice."""
    async with client_for(200, {"response_code": 5, "results": []}) as client:
        game = Trivia(context, rng=rng, client=client)
        log = EventLog(game)
        await asyncio.wait_for(game.start(), 2)
    assert log.kinds == ["error", "end"]
    assert isinstance(log.payloads("error")[0], UpstreamDataError)
    assert transport.last_view.content == (
        "Unable to fetch question data! Please try again."
    )
    assert game.result is None


@pytest.mark.asyncio
async def test_remote_question_win(
    context: GameContext, transport: FakeTransport, rng: random.Random
) -> None:
    """Test a game played on a fetched question."""
    async with client_for(200, {"response_code": 0, "results": [QUESTION]}) as client:
        game = Trivia(context, {"difficulty": "easy"}, rng=rng, client=client)
        log = EventLog(game)
        task = asyncio.create_task(game.start())
        await wait_until(lambda: game.collector is not None)
        assert game.trivia is not None
        answer = game.trivia.options.index("Central Processing Unit")
        transport.component_source.emit(click("trivia", answer, actor=PLAYER))
        await asyncio.wait_for(task, 2)
    (result,) = log.payloads("gameOver")
    assert result.outcome == "win"
    assert result.selected == answer
    assert len(transport.views[0].rows[0]) == 4


@pytest.mark.asyncio
async def test_static_question_lose(
    context: GameContext, transport: FakeTransport, rng: random.Random
) -> None:
    """Test that a wrong answer loses and shows the right one."""
    game = Trivia(context, {"mode": "single", "trivia": STATIC}, rng=rng)
    log = EventLog(game)
    task = asyncio.create_task(game.start())
    await wait_until(lambda: game.collector is not None)
    transport.component_source.emit(click("trivia", 1, actor=PLAYER))
    await asyncio.wait_for(task, 2)
    (result,) = log.payloads("gameOver")
    assert result.outcome == "lose"
    assert result.trivia == TriviaData(**STATIC)
    assert "The correct answer was True." in (
        transport.last_view.embeds[0].fields[-1].value
    )


@pytest.mark.asyncio
async def test_computed_question(
    context: GameContext, transport: FakeTransport, rng: random.Random
) -> None:
    """Test that a function can provide the question."""

    async def question(session: Trivia) -> dict[str, Any]:
        return {**STATIC, "question": f"Hello {session.player.name}?"}

    game = Trivia(context, {"trivia": question, "timeout": 0.05}, rng=rng)
    log = EventLog(game)
    await asyncio.wait_for(game.start(), 2)
    (result,) = log.payloads("gameOver")
    assert result.outcome == "timeout"
    assert result.trivia.question == "Hello alice?"
    assert result.selected is None
    assert transport.sent == 1
