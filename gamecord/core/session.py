"""Base class of every game session.

A session drives one game from the first view to the end view. It owns the
lifecycle bus, the turn arbitrator, the collector of the current round and
the optional versus negotiation. Games implement :meth:`GameSession.play`
with the helpers of this class and never touch concurrency primitives
directly.
"""

import enum
import logging
import random
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Generic, TypeVar
from uuid import uuid4

import msgspec

from gamecord.core.arbitrator import TurnArbitrator
from gamecord.core.collector import Handler, InputCollector, Predicate
from gamecord.core.errors import (
    ConfigurationError,
    FatalTransportError,
    InvalidActionError,
    TransportError,
)
from gamecord.core.events import EventKind, LifecycleBus, Listener
from gamecord.core.options import EmbedTemplate, Text, parse_options, text
from gamecord.core.result import GameResult
from gamecord.core.transport import (
    NAMESPACE,
    EventSource,
    InputEvent,
    Player,
    Transport,
)
from gamecord.core.versus import VersusNegotiator, VersusOptions
from gamecord.core.view import Colors, Embed, EmbedAuthor, EmbedFooter, View

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=GameResult)
Render = Callable[[], Awaitable[View]]


class SessionState(enum.Enum):
    """Lifecycle state of a session."""

    CREATED = "created"
    RUNNING = "running"
    AWAITING_INPUT = "awaiting_input"
    FINALIZING = "finalizing"
    ENDED = "ended"


@dataclass(frozen=True)
class GameContext:
    """What a host gives to a session.

    Attributes:
        transport: Platform operations for the conversation.
        player: The player starting the session.
    """

    transport: Transport
    player: Player


class SessionOptions(msgspec.Struct, forbid_unknown_fields=True, kw_only=True):
    """Options shared by every game.

    ``embed`` functions receive the session, ``end_embed`` functions
    receive the session and the result.
    """

    embed: EmbedTemplate = msgspec.field(default_factory=EmbedTemplate)
    end_embed: EmbedTemplate = msgspec.field(default_factory=EmbedTemplate)
    timeout: Annotated[float, msgspec.Meta(gt=0)] = 60.0
    not_player_message: Text = msgspec.field(
        default_factory=lambda: text("You are not allowed to use these buttons.")
    )


class GameSession(ABC, Generic[R]):
    """Interactive game attached to a conversation.

    Subclasses set ``name``, ``title`` and ``options_type`` and implement
    :meth:`play`. A session is started once with :meth:`start`, which
    returns when the session has ended.
    """

    name: ClassVar[str] = "game"
    title: ClassVar[str] = "Game"
    options_type: ClassVar[type[SessionOptions]] = SessionOptions

    def __init__(
        self,
        context: GameContext,
        options: Any = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the session and validate its options.

        Args:
            context: Transport and initiating player.
            options: Game options, a mapping or an options structure.
            rng: Random generator used by the game rules.

        Raises:
            ConfigurationError: If the options are invalid.
        """
        self.id = uuid4()
        self.options = parse_options(options, self.options_type)
        self.context = context
        self.transport = context.transport
        self.player = context.player
        self.rng = rng if rng is not None else random.SystemRandom()
        self.started_at = time.time()
        self._clock = time.monotonic()
        self.state = SessionState.CREATED
        self.events = LifecycleBus()
        self.arbitrator = TurnArbitrator()
        self.collector: InputCollector | None = None
        self.surface: Any = None
        self.result: R | None = None

        versus: VersusOptions | None = getattr(self.options, "versus", None)
        self.versus: VersusNegotiator | None = None
        if versus is not None:
            if versus.opponent.id == self.player.id:
                error_message = "A player cannot challenge themselves"
                raise ConfigurationError(error_message)
            self.versus = VersusNegotiator(self, versus)

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__qualname__} id={str(self.id)!r} "
            f"player={self.player.id!r} state={self.state.value!r}>"
        )

    @property
    def opponent(self) -> Player | None:
        """The invited player of a versus session."""
        return None if self.versus is None else self.versus.opponent

    @property
    def duration(self) -> float:
        """Seconds elapsed since the creation of the session."""
        return time.monotonic() - self._clock

    def on(self, kind: EventKind, listener: Listener) -> Listener:
        """Register a lifecycle listener, see :class:`LifecycleBus`."""
        return self.events.on(kind, listener)

    async def start(self) -> None:
        """Run the session until it ends.

        Failures are published on the lifecycle bus, ``end`` is always
        published once before returning.

        Raises:
            InvalidActionError: If the session was already started.
        """
        if self.state is not SessionState.CREATED:
            error_message = f"{self!r} was already started"
            raise InvalidActionError(error_message)
        self.state = SessionState.RUNNING
        logger.info("Start %s", self)
        try:
            await self.play()
        except Exception as err:
            logger.exception("Unexpected failure of %s", self)
            if self.state is not SessionState.ENDED:
                self.events.publish("fatalError", err)
        finally:
            self._end()

    @abstractmethod
    async def play(self) -> None:
        """Game specific flow, called once by :meth:`start`."""

    def _end(self) -> None:
        if self.state is SessionState.ENDED:
            return
        self.state = SessionState.ENDED
        logger.info("End %s after %.1f seconds", self, self.duration)
        self.events.publish("end")

    def fail(self, error: Exception) -> None:
        """Publish a fatal error and end the session."""
        logger.error("Fatal error in %s: %s", self, error)
        if self.state is not SessionState.ENDED:
            self.events.publish("fatalError", error)
        self._end()

    def report(self, error: Exception) -> None:
        """Publish a non fatal error, the session goes on."""
        logger.warning("Error in %s: %s", self, error)
        self.events.publish("error", error)

    async def open(self, render: Render) -> bool:
        """Show the first view of the game.

        Versus sessions negotiate first and show the game in place of the
        invitation.

        Args:
            render: Coroutine function building the first view.

        Returns:
            True if the game can go on. Otherwise the reason was published
            and the session must return from :meth:`play`.
        """
        invitation = None
        if self.versus is not None:
            invitation = await self.versus.negotiate()
            if invitation is None:
                return False
        operation = "send_initial" if invitation is None else "update_surface"
        try:
            view = await render()
            if invitation is None:
                self.surface = await self.transport.send_initial(view)
            else:
                self.surface = await self.transport.update_surface(
                    invitation, view
                )
        except Exception as err:  # noqa: BLE001
            self.fail(FatalTransportError.wrap(operation, err))
            return False
        return True

    async def collect(  # noqa: PLR0913
        self,
        handler: Handler,
        *,
        source: EventSource | None = None,
        namespace: str | None = NAMESPACE,
        accept: Predicate | None = None,
        idle: float | None = None,
        time_limit: float | None = None,
        on_reject: Handler | None = None,
    ) -> str:
        """Collect input until a stop condition and return its reason.

        Args:
            handler: Coroutine function called for each accepted event.
            source: Events to collect, the surface components by default.
            namespace: Required prefix of the action ids.
            accept: Predicate selecting the events of the participants.
            idle: Seconds without input before ending with ``"idle"``.
            time_limit: Lifetime in seconds before ending with ``"time"``.
            on_reject: Called for the events refused by ``accept``.

        Returns:
            The reason given to :meth:`stop`, ``"idle"`` or ``"time"``.

        Raises:
            InvalidActionError: If a collector is already active.
        """
        if self.collector is not None:
            error_message = f"{self!r} is already collecting input"
            raise InvalidActionError(error_message)
        self.collector = InputCollector(
            source if source is not None else self.transport.components(self.surface),
            handler,
            namespace=namespace,
            accept=accept,
            idle=idle,
            time=time_limit,
            on_reject=on_reject,
            on_error=self.report,
        )
        self.state = SessionState.AWAITING_INPUT
        try:
            reason = await self.collector.run()
        finally:
            self.collector = None
            if self.state is SessionState.AWAITING_INPUT:
                self.state = SessionState.RUNNING
        logger.info("Collection of %s ended: %s", self, reason)
        return reason

    def stop(self, reason: str) -> None:
        """End the current collection with a reason."""
        if self.collector is not None:
            self.collector.stop(reason)

    def is_player(self, event: InputEvent) -> bool:
        """Whether the event comes from the initiating player."""
        return event.actor_id == self.player.id

    def is_participant(self, event: InputEvent) -> bool:
        """Whether the event comes from the player or the opponent."""
        opponent = self.opponent
        return self.is_player(event) or (
            opponent is not None and event.actor_id == opponent.id
        )

    async def acknowledge(self, event: InputEvent) -> bool:
        """Acknowledge a click without answering.

        Returns:
            False if the acknowledgment failed, the error is published.
        """
        interaction = event.interaction
        if interaction is None or interaction.replied:
            return True
        try:
            await interaction.defer_update()
        except Exception as err:  # noqa: BLE001
            self.report(TransportError.wrap("defer_update", err))
            return False
        return True

    async def notify(self, event: InputEvent, content: str) -> None:
        """Answer a click with a message only the clicker can see."""
        if event.interaction is None:
            return
        try:
            await event.interaction.reply(content, ephemeral=True)
        except Exception as err:  # noqa: BLE001
            self.report(TransportError.wrap("reply", err))

    async def reject(self, event: InputEvent) -> None:
        """Answer a click coming from someone outside of the game."""
        message = await self.options.not_player_message.resolve(self)
        if message:
            await self.notify(event, message)
        else:
            await self.acknowledge(event)

    async def refresh(self, view: View, event: InputEvent | None = None) -> None:
        """Show a new view of the game during a turn.

        The view goes through the interaction of the event when it was
        acknowledged, through the surface otherwise.
        """
        try:
            if (
                event is not None
                and event.interaction is not None
                and event.interaction.replied
            ):
                await event.interaction.edit(view)
            else:
                self.surface = await self.transport.update_surface(
                    self.surface, view
                )
        except Exception as err:  # noqa: BLE001
            self.report(TransportError.wrap("edit", err))

    async def play_turn(
        self,
        event: InputEvent,
        apply: Callable[[InputEvent], Awaitable[None]],
    ) -> None:
        """Acknowledge an event and apply it if no other turn is running.

        ``apply`` validates the event, mutates the board and renders the
        board with :meth:`refresh`, all while holding the turn token. An
        event that cannot be acknowledged is not applied.
        """
        if not await self.acknowledge(event):
            return
        with self.arbitrator.turn() as token:
            if token is None:
                logger.warning("Drop %r in %s, turn in progress", event, self)
                return
            await apply(event)

    def build_result(self, result_type: type[R], **fields: Any) -> R:
        """Create the result record of the session."""
        return result_type(
            player=self.player,
            started_at=self.started_at,
            duration=self.duration,
            **fields,
        )

    async def finalize(self, result: R) -> None:
        """Publish the result, show the end view and end the session."""
        if self.state in (SessionState.FINALIZING, SessionState.ENDED):
            logger.warning("Ignore result %r, %s is ending", result, self)
            return
        self.state = SessionState.FINALIZING
        self.result = result
        logger.info("Game over for %s: %s", self, result.outcome)
        self.events.publish("gameOver", result)
        try:
            view = await self.render_end(result)
            self.surface = await self.transport.update_surface(self.surface, view)
        except Exception as err:  # noqa: BLE001
            self.report(TransportError.wrap("update_surface", err))
        self._end()

    @abstractmethod
    async def render_end(self, result: R) -> View:
        """Build the view shown once the game is over."""

    def embed_author(self) -> EmbedAuthor | None:
        """Author line of the game embeds, the player for solo games."""
        if self.versus is not None:
            return None
        return EmbedAuthor(name=self.player.name, icon_url=self.player.avatar_url)

    def embed_footer(self) -> EmbedFooter | None:
        """Footer line of the game embeds, both players for versus games."""
        opponent = self.opponent
        if opponent is None:
            return None
        return EmbedFooter(text=f"{self.player.name} vs {opponent.name}")

    def base_embed(self) -> Embed:
        """Embed every game view starts from."""
        return Embed(
            title=self.title,
            color=Colors.BLURPLE,
            author=self.embed_author(),
            footer=self.embed_footer(),
        )

    async def build_embed(self, **props: Any) -> Embed:
        """Build the embed of an in-progress view.

        A computed ``embed`` option replaces the embed, a static one
        overrides the attributes given by the game.
        """
        template = self.options.embed
        if template.is_computed:
            return await template.resolve(self) or Embed()
        return self.base_embed().merge(Embed(**props), template.value or Embed())

    async def build_end_embed(self, result: R, **props: Any) -> Embed:
        """Build the embed of the end view.

        ``end_embed`` takes precedence, then a computed ``embed``, then the
        static ``embed`` with the attributes given by the game on top.
        """
        end_template = self.options.end_embed
        if end_template.is_computed:
            return await end_template.resolve(self, result) or Embed()
        template = self.options.embed
        if template.is_computed:
            return await template.resolve(self) or Embed()
        return self.base_embed().merge(
            template.value or Embed(),
            Embed(**props),
            end_template.value or Embed(),
        )
