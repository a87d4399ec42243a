"""
Text helpers.

Literal string replacement plus the regex detectors used to find embedded
YouTube videos, SoundCloud tracks and linked .mp3 files in card backs.
"""

import re

# https://stackoverflow.com/questions/6903823/regex-for-youtube-id
YOUTUBE_RE = re.compile(
    r'(?:youtu\.be/|youtube\.com(?:/embed/|/v/|/watch\?v=|/user/\S+'
    r'|/ytscreeningroom\?v=|/sandalsResorts#\w/\w/.*/))([^/&]{10,12})'
)
SOUNDCLOUD_RE = re.compile(r'https?://soundcloud\.com/\S*', re.IGNORECASE)
ANCHOR_HREF_RE = re.compile(r'<a\s+(?:[^>]*?\s+)?href=(["\'])(.*?)\1', re.IGNORECASE)


def replace_all(original: str, old: str, new: str) -> str:
    """Replace every occurrence of *old*, treating it as plain text."""
    if not old:
        return original
    return original.replace(old, new)


def ensure_not_null(value: str | None, callback):
    """Return None for empty or blank input, otherwise the callback's result."""
    if not value or not value.strip():
        return None
    return callback()


def get_youtube_id(text: str | None) -> str | None:
    """Return the first YouTube video id in *text*, ignoring SoundCloud URLs."""

    def _find():
        m = YOUTUBE_RE.search(text)
        if not m:
            return None
        # soundcloud embeds can look like youtube user urls
        if "https://soundcloud.com" in m.group(0):
            return None
        return m.group(1)

    return ensure_not_null(text, _find)


def get_soundcloud_url(text: str | None) -> str | None:
    """Return the first SoundCloud track URL in *text*."""

    def _find():
        m = SOUNDCLOUD_RE.search(text)
        if not m:
            return None
        return m.group(0).split('">')[0]

    return ensure_not_null(text, _find)


def get_mp3_file(text: str | None) -> str | None:
    """
    Return the href of the first link in *text* if it points at a local
    .mp3 file. Absolute http(s) links are never treated as local audio.
    """

    def _find():
        m = ANCHOR_HREF_RE.search(text)
        if not m:
            return None
        href = m.group(2)
        if not href.endswith(".mp3") or href.startswith("http"):
            return None
        return href

    return ensure_not_null(text, _find)


def youtube_embed(video_id: str) -> str:
    src = f"https://www.youtube.com/embed/{video_id}?".replace('"', "", 1)
    return (
        f"<iframe width='560' height='315' src='{src}' "
        "frameborder='0' allowfullscreen></iframe>"
    )


def soundcloud_embed(url: str) -> str:
    return (
        "<iframe width='100%' height='166' scrolling='no' frameborder='no' "
        f"src='https://w.soundcloud.com/player/?url={url}'></iframe>"
    )
