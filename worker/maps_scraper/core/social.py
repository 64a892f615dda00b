"""Static catalogue of social networks recognised on business websites."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Pattern, Tuple

EMAIL_REGEX = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)


@dataclass(frozen=True)
class SocialPlatform:
    name: str
    pattern: Pattern[str]


def _platform(name: str, expression: str) -> SocialPlatform:
    return SocialPlatform(name=name, pattern=re.compile(expression, re.IGNORECASE))


SOCIAL_PLATFORMS: Tuple[SocialPlatform, ...] = (
    _platform("Facebook", r"^https?://(?:[\w-]+\.)?(?:facebook\.com|fb\.com|fb\.me)/"),
    _platform("Twitter", r"^https?://(?:www\.|mobile\.)?(?:twitter\.com|x\.com)/"),
    _platform("LinkedIn", r"^https?://(?:[\w-]+\.)?linkedin\.com/"),
    _platform("Instagram", r"^https?://(?:www\.)?(?:instagram\.com|instagr\.am)/"),
    _platform("YouTube", r"^https?://(?:www\.|m\.)?(?:youtube\.com|youtu\.be)/"),
    _platform("TikTok", r"^https?://(?:www\.|vm\.)?tiktok\.com/"),
    _platform("Pinterest", r"^https?://(?:[\w-]+\.)?(?:pinterest\.[a-z.]+|pin\.it)/"),
    _platform("Snapchat", r"^https?://(?:www\.)?snapchat\.com/"),
    _platform("Reddit", r"^https?://(?:www\.|old\.)?reddit\.com/"),
    _platform("Tumblr", r"^https?://(?:[\w-]+\.)?tumblr\.com(?:/|$)"),
    _platform("WhatsApp", r"^https?://(?:wa\.me|(?:api\.|chat\.|www\.)?whatsapp\.com)/"),
    _platform("Vimeo", r"^https?://(?:www\.)?vimeo\.com/"),
    _platform("Discord", r"^https?://(?:www\.)?(?:discord\.gg|discord\.com|discordapp\.com)/"),
    _platform("Spotify", r"^https?://open\.spotify\.com/"),
    _platform("Medium", r"^https?://(?:[\w-]+\.)?medium\.com(?:/|$)"),
    _platform("Behance", r"^https?://(?:www\.)?behance\.net/"),
    _platform("Flickr", r"^https?://(?:www\.)?(?:flickr\.com|flic\.kr)/"),
    _platform("Twitch", r"^https?://(?:www\.|m\.)?twitch\.tv/"),
    _platform("Periscope", r"^https?://(?:www\.)?(?:periscope\.tv|pscp\.tv)/"),
    _platform("Skype", r"^(?:skype:|https?://join\.skype\.com/)"),
)
