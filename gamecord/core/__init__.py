"""Session engine shared by every game."""

from gamecord.core.arbitrator import TurnArbitrator, TurnToken
from gamecord.core.collector import IDLE, TIME, InputCollector
from gamecord.core.errors import (
    ConfigurationError,
    FatalTransportError,
    GameError,
    InvalidActionError,
    TransportError,
    UpstreamDataError,
)
from gamecord.core.events import LifecycleBus
from gamecord.core.options import EmbedTemplate, Text, embed, parse_options, text
from gamecord.core.result import GameResult, VersusResult
from gamecord.core.session import (
    GameContext,
    GameSession,
    SessionOptions,
    SessionState,
)
from gamecord.core.transport import (
    NAMESPACE,
    InputEvent,
    Player,
    Transport,
    action_id,
)
from gamecord.core.versus import (
    InvitationState,
    VersusNegotiator,
    VersusOptions,
)
from gamecord.core.view import Button, ButtonStyle, Colors, Embed, View

__all__ = [
    "IDLE",
    "NAMESPACE",
    "TIME",
    "Button",
    "ButtonStyle",
    "Colors",
    "ConfigurationError",
    "Embed",
    "EmbedTemplate",
    "FatalTransportError",
    "GameContext",
    "GameError",
    "GameResult",
    "GameSession",
    "InputCollector",
    "InputEvent",
    "InvalidActionError",
    "InvitationState",
    "LifecycleBus",
    "Player",
    "SessionOptions",
    "SessionState",
    "Text",
    "Transport",
    "TransportError",
    "TurnArbitrator",
    "TurnToken",
    "UpstreamDataError",
    "VersusNegotiator",
    "VersusOptions",
    "VersusResult",
    "View",
    "action_id",
    "embed",
    "parse_options",
    "text",
]
