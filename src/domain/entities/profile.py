"""Profile aggregate domain entity."""

from dataclasses import dataclass, field
from datetime import datetime

DEFAULT_STATUS_TEXT = "last seen unknown"
DEFAULT_LOCATION = "Somewhere"
DEFAULT_MOOD = "Vibing"
DEFAULT_THEME = "theme-dark"
DEFAULT_BACKGROUND_KIND = "particles"
DEFAULT_NAME_STYLE = "default"
DEFAULT_NAME_COLOR = "#FFFFFF"
DEFAULT_SOCIAL_ICON_STYLE = "default"
DEFAULT_SOCIAL_ICON_COLOR = "#8B5CF6"

THEMES = frozenset({"theme-dark", "theme-blue", "theme-purple", "theme-red"})


class BackgroundKinds:
    """Known background kinds."""

    NONE = "none"
    PARTICLES = "particles"
    IMAGE = "image"
    VIDEO = "video"

    GRADIENTS = frozenset(
        {
            "gradient-blue",
            "gradient-purple",
            "gradient-sunset",
            "gradient-ocean",
            "gradient-luxury",
            "gradient-elegant",
            "gradient-deep-black",
        }
    )
    ANIMATED = frozenset({"matrix", "stars", "waves", "geometric", "rain"})

    # Kinds that render uploaded or linked media and therefore need a ref
    MEDIA = frozenset({IMAGE, VIDEO})

    ALL = frozenset({NONE, PARTICLES, IMAGE, VIDEO}) | GRADIENTS | ANIMATED


SOCIAL_PLATFORMS = frozenset(
    {
        "discord",
        "instagram",
        "github",
        "telegram",
        "tiktok",
        "spotify",
        "snapchat",
        "roblox",
        "youtube",
    }
)


@dataclass
class Profile:
    """Domain entity for one user's public page.

    ``owner_id`` is the stable external identity (a Discord user id in
    practice) and never changes after creation.
    """

    owner_id: str
    display_name: str
    join_date: str
    status_text: str = DEFAULT_STATUS_TEXT
    location: str = DEFAULT_LOCATION
    mood: str = DEFAULT_MOOD
    avatar_ref: str | None = None
    provider_username: str | None = None
    social_links: dict[str, str] = field(default_factory=dict)
    view_count: int = 0
    shareable_slug: str | None = None
    theme_id: str = DEFAULT_THEME
    background_kind: str = DEFAULT_BACKGROUND_KIND
    background_ref: str | None = None
    audio_ref: str | None = None
    audio_title: str | None = None
    name_style: str = DEFAULT_NAME_STYLE
    name_color: str = DEFAULT_NAME_COLOR
    social_icon_style: str = DEFAULT_SOCIAL_ICON_STYLE
    social_icon_color: str = DEFAULT_SOCIAL_ICON_COLOR
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    @property
    def effective_slug(self) -> str:
        """Slug used in share links; the owner id when none was chosen."""
        return self.shareable_slug or self.owner_id

    def is_owner_view(self, caller_id: str | None) -> bool:
        """Whether the caller is looking at their own profile."""
        return caller_id is not None and caller_id == self.owner_id
