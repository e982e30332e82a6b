"""Platform independent description of what a game shows."""

import enum
from collections.abc import Iterable

import msgspec


class Colors(enum.IntEnum):
    """Embed colors used by the built-in games."""

    BLURPLE = 0x5865F2
    GREEN = 0x57F287
    YELLOW = 0xFEE75C
    RED = 0xED4245
    BLUE = 0x3498DB
    GREY = 0x95A5A6


class ButtonStyle(enum.IntEnum):
    """Button styles, with the values used by the Discord API."""

    PRIMARY = 1
    SECONDARY = 2
    SUCCESS = 3
    DANGER = 4


class EmbedAuthor(msgspec.Struct, frozen=True):
    """Author line of an embed."""

    name: str
    icon_url: str | None = None


class EmbedFooter(msgspec.Struct, frozen=True):
    """Footer line of an embed."""

    text: str
    icon_url: str | None = None


class EmbedField(msgspec.Struct, frozen=True):
    """Named field of an embed."""

    name: str
    value: str
    inline: bool = False


def parse_color(value: int | str) -> int:
    """Convert ``"#5865F2"`` or ``"0x5865F2"`` into an integer color.

    Raises:
        ValueError: If the string is not an hexadecimal color.
    """
    if isinstance(value, int):
        return value
    text = value.strip().lower().removeprefix("#").removeprefix("0x")
    return int(text, 16)


class Embed(msgspec.Struct, omit_defaults=True, forbid_unknown_fields=True):
    """Rich embed, every attribute is optional."""

    title: str | None = None
    description: str | None = None
    url: str | None = None
    color: int | str | None = None
    author: EmbedAuthor | None = None
    footer: EmbedFooter | None = None
    fields: list[EmbedField] = msgspec.field(default_factory=list)
    image_url: str | None = None
    thumbnail_url: str | None = None

    def __post_init__(self) -> None:
        """Normalize string colors."""
        if isinstance(self.color, str):
            self.color = parse_color(self.color)

    def merge(self, *others: "Embed") -> "Embed":
        """Build a new embed overriding attributes left to right.

        Attributes left to their default in ``others`` do not override
        the attributes of ``self``.

        Args:
            *others: Embeds whose attributes take precedence.

        Returns:
            The merged embed.
        """
        values = msgspec.structs.asdict(self)
        for other in others:
            for name in other.__struct_fields__:
                value = getattr(other, name)
                if value is not None and value != []:
                    values[name] = value
        return Embed(**values)


class Button(msgspec.Struct, frozen=True):
    """Clickable button carrying an action id."""

    custom_id: str
    label: str | None = None
    emoji: str | None = None
    style: ButtonStyle = ButtonStyle.SECONDARY
    disabled: bool = False

    def with_disabled(self, disabled: bool = True) -> "Button":  # noqa: FBT001, FBT002
        """Return a copy of the button with another disabled state."""
        return msgspec.structs.replace(self, disabled=disabled)


class View(msgspec.Struct):
    """Content of a game surface.

    A ``content`` of None removes the text of the surface when editing.
    """

    content: str | None = None
    embeds: list[Embed] = msgspec.field(default_factory=list)
    rows: list[list[Button]] = msgspec.field(default_factory=list)
    mention_users: bool = False

    def buttons(self) -> Iterable[Button]:
        """Iterate over every button of the view."""
        for row in self.rows:
            yield from row

    def disabled(self) -> "View":
        """Return a copy of the view with every button disabled."""
        return msgspec.structs.replace(
            self,
            rows=[[button.with_disabled() for button in row] for row in self.rows],
        )
