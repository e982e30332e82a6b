"""Trivia, answer a single question fetched from the Open Trivia Database.

Questions come from ``opentdb.com`` unless a ``trivia`` option gives a
question or a function returning one. A question that cannot be retrieved
ends the session before anything is shown, with a short notice.
"""

import logging
import random
from dataclasses import dataclass
from typing import Any, ClassVar, Literal
from urllib.parse import unquote

import httpx
import msgspec

from gamecord.core import (
    Button,
    GameContext,
    InputEvent,
    SessionOptions,
    Text,
    View,
    action_id,
    text,
)
from gamecord.core.errors import TransportError, UpstreamDataError
from gamecord.core.options import Dynamic
from gamecord.core.result import GameResult
from gamecord.core.view import ButtonStyle, Colors, EmbedField
from gamecord.games.solo import SoloGame, SoloOptions

logger = logging.getLogger(__name__)

API_URL = "https://opentdb.com/api.php"
API_TIMEOUT = 10.0
DIFFICULTIES = ("easy", "medium", "hard")
ANSWER = "$answer"
TRUE = "True"
FALSE = "False"

# Answer code of opentdb when too many requests were sent
RATE_LIMITED = 5


class TriviaData(msgspec.Struct, forbid_unknown_fields=True):
    """A question and its possible answers.

    For ``single`` mode questions, the options are ``"True"`` and
    ``"False"``.
    """

    question: str
    difficulty: str
    category: str
    answer: str
    options: list[str]


class _ApiQuestion(msgspec.Struct):
    difficulty: str
    category: str
    question: str
    correct_answer: str
    incorrect_answers: list[str]


class _ApiResponse(msgspec.Struct):
    response_code: int = 0
    results: list[_ApiQuestion] = msgspec.field(default_factory=list)


async def fetch_trivia(
    client: httpx.AsyncClient,
    mode: str,
    difficulty: str,
    rng: random.Random,
) -> TriviaData:
    """Fetch a random question from opentdb.

    Args:
        client: HTTP client used for the request.
        mode: ``"multiple"`` for four answers, ``"single"`` for true/false.
        difficulty: One of ``DIFFICULTIES``.
        rng: Random generator shuffling the answers.

    Returns:
        The decoded question.

    Raises:
        UpstreamDataError: If the request fails, the answer is malformed,
            empty or rate limited.
    """
    params = {
        "amount": 1,
        "type": "boolean" if mode == "single" else "multiple",
        "difficulty": difficulty,
        "encode": "url3986",
    }
    try:
        response = await client.get(API_URL, params=params)
        response.raise_for_status()
        payload = msgspec.json.decode(response.content, type=_ApiResponse)
    except (httpx.HTTPError, msgspec.DecodeError) as err:
        error_message = f"Unable to fetch a trivia question: {err}"
        raise UpstreamDataError(error_message) from err
    if payload.response_code == RATE_LIMITED:
        error_message = "Rate limited by opentdb"
        raise UpstreamDataError(error_message, payload)
    if not payload.results:
        error_message = f"No trivia question (code {payload.response_code})"
        raise UpstreamDataError(error_message, payload)
    data = payload.results[0]
    if mode == "single":
        options = [TRUE, FALSE]
    else:
        options = [
            unquote(answer)
            for answer in (*data.incorrect_answers, data.correct_answer)
        ]
        rng.shuffle(options)
    return TriviaData(
        question=unquote(data.question),
        difficulty=unquote(data.difficulty),
        category=unquote(data.category),
        answer=unquote(data.correct_answer),
        options=options,
    )


class TriviaSource(Dynamic[TriviaData]):
    """Question option, a question or a function of the session returning one."""

    @classmethod
    def coerce(cls, obj: Any) -> TriviaData | None:
        """Validate a static question.

        Raises:
            TypeError: If the value cannot be converted to a question.
        """
        if obj is None or isinstance(obj, TriviaData):
            return obj
        try:
            return msgspec.convert(obj, type=TriviaData, from_attributes=True)
        except msgspec.ValidationError as err:
            error_message = f"Invalid trivia {obj!r}: {err}"
            raise TypeError(error_message) from err


def _not_player_message(session: "Trivia") -> str:
    return f"Only {session.player.mention} can use this menu."


class TriviaOptions(SoloOptions, kw_only=True):
    """Options of the Trivia game.

    Without ``difficulty``, a random one is picked for each session.
    """

    mode: Literal["multiple", "single"] = "multiple"
    difficulty: Literal["easy", "medium", "hard"] | None = None
    trivia: TriviaSource = msgspec.field(default_factory=TriviaSource)
    true_text: str = TRUE
    false_text: str = FALSE
    hint: str = "You have 60 seconds to guess the answer."
    win_message: Text = msgspec.field(
        default_factory=lambda: text(
            lambda result, session: (
                f"You won! The correct answer was {result.trivia.answer}."
            )
        )
    )
    lose_message: Text = msgspec.field(
        default_factory=lambda: text(
            lambda result, session: (
                f"You lost! The correct answer was {result.trivia.answer}."
            )
        )
    )
    error_message: Text = msgspec.field(
        default_factory=lambda: text(
            "Unable to fetch question data! Please try again."
        )
    )
    not_player_message: Text = msgspec.field(
        default_factory=lambda: text(_not_player_message)
    )


@dataclass(frozen=True, kw_only=True)
class TriviaResult(GameResult):
    """Result of a Trivia game.

    Attributes:
        trivia: The question asked.
        selected: Index of the chosen answer in ``trivia.options``, None
            on timeout.
    """

    OUTCOMES: ClassVar[tuple[str, ...]] = ("win", "lose", "timeout")

    trivia: TriviaData
    selected: int | None = None


class Trivia(SoloGame[TriviaResult]):
    """A single question answered with one button per option."""

    name = "trivia"
    title = "Trivia"
    options: TriviaOptions
    options_type: ClassVar[type[SessionOptions]] = TriviaOptions

    def __init__(
        self,
        context: GameContext,
        options: Any = None,
        *,
        rng: random.Random | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            context: Transport and initiating player.
            options: Game options.
            rng: Random generator picking the difficulty.
            client: HTTP client used to fetch the question, a new client is
                opened for the request otherwise.
        """
        super().__init__(context, options, rng=rng)
        self.client = client
        self.difficulty = self.options.difficulty or self.rng.choice(DIFFICULTIES)
        self.trivia: TriviaData | None = None
        self.selected: int | None = None

    async def fetch(self) -> TriviaData:
        """Retrieve the question of the session.

        Raises:
            UpstreamDataError: If no question can be retrieved.
        """
        source = self.options.trivia
        if source.is_set:
            trivia = await source.resolve(self)
            if trivia is None:
                error_message = "The trivia option returned no question"
                raise UpstreamDataError(error_message)
            try:
                return TriviaSource.coerce(trivia)  # type: ignore[return-value]
            except TypeError as err:
                raise UpstreamDataError(str(err), trivia) from err
        if self.client is not None:
            return await fetch_trivia(
                self.client, self.options.mode, self.difficulty, self.rng
            )
        async with httpx.AsyncClient(timeout=API_TIMEOUT) as client:
            return await fetch_trivia(
                client, self.options.mode, self.difficulty, self.rng
            )

    def _question(self, trivia: TriviaData) -> str:
        return (
            f"**{trivia.question}**\n\n"
            f"**Difficulty:** {trivia.difficulty}\n"
            f"**Category:** {trivia.category}"
        )

    def _buttons(
        self, trivia: TriviaData, *, ended: bool = False
    ) -> list[list[Button]]:
        selected = self.selected
        if ended and selected is None and trivia.answer in trivia.options:
            selected = trivia.options.index(trivia.answer)
        if self.options.mode == "single":
            labels = [self.options.true_text, self.options.false_text]
        else:
            labels = trivia.options
        buttons = []
        for index, label in enumerate(labels):
            style = ButtonStyle.SECONDARY
            if index == selected:
                correct = trivia.options[index] == trivia.answer
                style = ButtonStyle.SUCCESS if correct else ButtonStyle.DANGER
            buttons.append(
                Button(
                    custom_id=action_id(self.name, index),
                    label=label,
                    style=style,
                    disabled=ended,
                )
            )
        return [buttons]

    async def render_board(self) -> View:
        """Build the question with one button per answer."""
        trivia = self.trivia
        if trivia is None:
            error_message = f"{self!r} has no question to show"
            raise RuntimeError(error_message)
        embed = await self.build_embed(
            description=self._question(trivia),
            fields=[EmbedField(name="\u200b", value=self.options.hint)],
        )
        return View(content=None, embeds=[embed], rows=self._buttons(trivia))

    async def apply(self, event: InputEvent) -> None:
        """Record the first answer and end the game."""
        if self.trivia is None or self.selected is not None:
            return
        try:
            selected = int(event.args[-1])
        except (IndexError, ValueError):
            logger.warning("Invalid answer in %r", event)
            return
        if not 0 <= selected < len(self.trivia.options):
            return
        self.selected = selected
        self.stop(ANSWER)

    def conclude(self, reason: str) -> TriviaResult | None:
        """Map the end reason to the outcome."""
        trivia = self.trivia
        if trivia is None:
            return None
        if reason == ANSWER and self.selected is not None:
            correct = trivia.options[self.selected] == trivia.answer
            outcome = "win" if correct else "lose"
        elif reason == "idle":
            outcome = "timeout"
        else:
            return None
        return self.build_result(
            TriviaResult, outcome=outcome, trivia=trivia, selected=self.selected
        )

    async def render_end(self, result: TriviaResult) -> View:
        """Show the question with the right and the chosen answers."""
        if result.outcome == "win":
            message = await self.options.win_message.resolve(result, self)
        else:
            message = await self.options.lose_message.resolve(result, self)
        embed = await self.build_end_embed(
            result,
            description=self._question(result.trivia),
            color=Colors.GREEN if result.outcome == "win" else Colors.RED,
            fields=[EmbedField(name="Game Over", value=message or "")],
        )
        return View(
            content=None,
            embeds=[embed],
            rows=self._buttons(result.trivia, ended=True),
        )

    async def play(self) -> None:
        """Fetch the question, then wait for a single answer."""
        try:
            self.trivia = await self.fetch()
        except UpstreamDataError as err:
            self.report(err)
            notice = await self.options.error_message.resolve(self)
            if notice:
                try:
                    self.surface = await self.transport.send_initial(
                        View(content=notice)
                    )
                except Exception as send_err:  # noqa: BLE001
                    self.report(TransportError.wrap("send_initial", send_err))
            return
        await super().play()
