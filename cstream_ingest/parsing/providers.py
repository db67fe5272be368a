"""Hosting-provider detection for streaming embed URLs."""

from __future__ import annotations

import re
from typing import Final, Sequence
from urllib.parse import urlsplit

from ..common.text import capitalize_first

__all__ = [
    "PROVIDER_PATTERNS",
    "check_pattern_table",
    "detect_provider",
    "provider_from_identifier",
]

# Ordered (lowercase substring, display name) pairs; the first match wins, so a
# branded pattern must precede any broader pattern for the same host.
PROVIDER_PATTERNS: Final[tuple[tuple[str, str], ...]] = (
    ("sibnet", "Sibnet"),
    ("vidomly", "Vidomly"),
    ("vidmoly", "Vidmoly"),
    ("vudeo", "Vudeo"),
    ("sendvid", "SendVid"),
    ("doodstream", "DoodStream"),
    ("dood.", "Dood"),
    ("streamtape", "StreamTape"),
    ("vidoza", "Vidoza"),
    ("mixdrop", "MixDrop"),
    ("upstream", "UpStream"),
    ("streamlare", "StreamLare"),
    ("filemoon", "FileMoon"),
    ("voe.sx", "Voe"),
    ("voe-", "Voe"),
    ("uqload", "UQLoad"),
    ("mp4upload", "MP4Upload"),
    ("yourupload", "YourUpload"),
    ("fembed", "Fembed"),
    ("streamwish", "StreamWish"),
    ("vtube", "VTube"),
    ("streamvid", "StreamVid"),
    ("filelions", "FileLions"),
    ("embedsito", "EmbedSito"),
    ("vembed", "VEmbed"),
    ("videovard", "VideoVard"),
    ("ok.ru", "OK.ru"),
    ("okru", "OK.ru"),
    ("dailymotion", "Dailymotion"),
    ("rutube", "Rutube"),
    ("vk.com", "VK"),
    ("vkvideo", "VK Video"),
    ("myvi", "MyVI"),
    ("netu", "Netu"),
    ("hqq", "HQQ"),
    ("waaw", "Waaw"),
    ("supervideo", "SuperVideo"),
    ("streamz", "Streamz"),
    ("streamsb", "StreamSB"),
    ("sbembed", "SBEmbed"),
    ("sbplay", "SBPlay"),
    ("cloudemb", "CloudEmb"),
    ("streamhub", "StreamHub"),
    ("embedgram", "EmbedGram"),
    ("vidsrc", "VidSrc"),
    ("vidbem", "VidBem"),
    ("vidcloud", "VidCloud"),
    ("gdrive", "GDrive"),
    ("gdtot", "GDTot"),
    ("aparat", "Aparat"),
    ("mega.nz", "Mega"),
    ("mega.co", "Mega"),
    ("uptobox", "UpToBox"),
    ("uptostream", "UpToStream"),
    ("vidlox", "VidLox"),
    ("wolfstream", "WolfStream"),
    ("evoload", "EvoLoad"),
    ("mcloud", "MCloud"),
    ("vidshar", "VidShar"),
    ("streamable", "Streamable"),
    ("jwplayer", "JWPlayer"),
    ("gounlimited", "GoUnlimited"),
    ("vupload", "VUpload"),
    ("fastupload", "FastUpload"),
    ("youdbox", "YoudBox"),
    ("cloudvideo", "CloudVideo"),
    ("playerx", "PlayerX"),
    ("ninjastream", "NinjaStream"),
    ("vidfast", "VidFast"),
    ("streamsss", "StreamSSS"),
    ("vidguard", "VidGuard"),
    ("lulustream", "LuluStream"),
    ("vidplay", "VidPlay"),
    ("mystream", "MyStream"),
    ("streamango", "Streamango"),
    ("rapidvideo", "RapidVideo"),
    ("openload", "Openload"),
    ("streamcherry", "StreamCherry"),
    ("flix555", "Flix555"),
    ("estream", "EStream"),
    ("videobin", "VideoBin"),
    ("streamhd", "StreamHD"),
)

_HOST_PREFIX_RE = re.compile(r"^(?:www\.)?(?:player\.)?(?:embed\.)?")
_IDENTIFIER_PREFIX_RE = re.compile(
    r"^(?:[ée]pisodes?|eps?|videos?|vids?|links?|liens?|urls?"
    r"|players?|lecteurs?|sources?|streams?|embeds?)[_\-]?",
    re.IGNORECASE,
)


def check_pattern_table(table: Sequence[tuple[str, str]]) -> None:
    """Raise ``ValueError`` when *table* holds unreachable or malformed entries.

    A pattern is unreachable when an earlier pattern is a substring of it:
    every URL containing the later pattern already matched the earlier one.
    """

    seen: list[str] = []
    for pattern, name in table:
        if not pattern or pattern != pattern.lower():
            raise ValueError(f"Provider pattern {pattern!r} must be non-empty lowercase")
        if not name:
            raise ValueError(f"Provider pattern {pattern!r} has no display name")
        for earlier in seen:
            if earlier in pattern:
                raise ValueError(
                    f"Provider pattern {pattern!r} is shadowed by earlier pattern {earlier!r}"
                )
        seen.append(pattern)


check_pattern_table(PROVIDER_PATTERNS)


def _provider_from_hostname(url: str) -> str:
    try:
        hostname = urlsplit(url).hostname or ""
    except ValueError:
        return ""
    hostname = _HOST_PREFIX_RE.sub("", hostname)
    label = hostname.split(".")[0]
    if len(label) <= 1:
        return ""
    return capitalize_first(label)


def detect_provider(
    url: str, patterns: Sequence[tuple[str, str]] = PROVIDER_PATTERNS
) -> str:
    """Return the display name of the provider hosting *url*, or ``""``."""

    lowered = url.lower()
    for pattern, name in patterns:
        if pattern in lowered:
            return name
    return _provider_from_hostname(url)


def provider_from_identifier(identifier: str) -> str:
    """Derive a provider name from an array identifier such as ``eps_sibnet``."""

    cleaned = _IDENTIFIER_PREFIX_RE.sub("", identifier).strip("_- ")
    if len(cleaned) <= 1:
        return ""
    return capitalize_first(cleaned)
