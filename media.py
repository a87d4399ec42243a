"""
Media handling.

Resolves image and audio references in card backs against the exported
file set, renames them to stable hashed names, and registers the bytes
with the exporter so they end up inside the package.
"""

from __future__ import annotations

import hashlib
import posixpath
import re
from urllib.parse import unquote

from bs4 import BeautifulSoup

from .text import get_mp3_file

SUFFIX_RE = re.compile(r'\.[0-9a-z]+$', re.IGNORECASE)
IMG_TAG_RE = re.compile(r'<+\s?img')


def suffix(path: str | None) -> str | None:
    """'img/photo.PNG' → '.PNG'; None when there is no extension."""
    if not path:
        return None
    m = SUFFIX_RE.search(path)
    return m.group(0) if m else None


def new_unique_file_name(path: str) -> str:
    """Hash the original path to avoid name clashes and odd characters."""
    return hashlib.sha1(path.encode("utf-8")).hexdigest()


def _candidates(path: str, root_names: list[str]) -> list[str]:
    candidates = [path, posixpath.normpath(path)]
    for root in root_names:
        if not root:
            continue
        lookup = f"{root}/{path}".replace("../", "")
        candidates.extend([lookup, posixpath.normpath(lookup)])
    return list(dict.fromkeys(candidates))


def resolve(files: dict, path: str, root_names: list[str]):
    """
    Find the bytes for *path* in the file set.

    Search order:
    1. The path as written
    2. Under each root folder, with ../ segments dropped
    """
    for candidate in _candidates(path, root_names):
        data = files.get(candidate)
        if data is not None:
            if candidate != path:
                print(f"[media] Resolved '{path}' → {candidate}")
            return data
    return None


def embed_file(exporter, files: dict, path: str, root_names: list[str]) -> str | None:
    """
    Register the file at *path* with the exporter.

    Returns the new media name, or None when the path has no extension
    or cannot be found.
    """
    ext = suffix(path)
    if not ext:
        return None

    data = resolve(files, path, root_names)
    if data is None:
        used = root_names[0] if root_names else ""
        print(f"[media] WARNING: Missing relative path to {path} used {used}")
        return None

    new_name = new_unique_file_name(path) + ext
    exporter.add_media(new_name, data)
    return new_name


def embed_images(back: str, exporter, files: dict, root_names: list[str]) -> tuple[str, list[str], int]:
    """
    Embed every local <img> in *back*.

    Returns ``(back, media_names, image_count)``. The count is a plain
    textual count of img tags in the input, whether or not they embedded.
    """
    soup = BeautifulSoup(back, "html.parser")
    images = soup.find_all("img")
    if not images:
        return back, [], 0

    media = []
    for img in images:
        src = img.get("src")
        if not src or src.startswith("http"):
            continue
        new_name = embed_file(exporter, files, unquote(src), root_names)
        if new_name:
            img["src"] = new_name
            media.append(new_name)

    return str(soup), media, len(IMG_TAG_RE.findall(back))


def embed_audio(back: str, exporter, files: dict, root_names: list[str]) -> tuple[str, str | None]:
    """Append an Anki [sound:...] tag for the first linked local .mp3."""
    audio = get_mp3_file(back)
    if not audio:
        return back, None
    new_name = embed_file(exporter, files, unquote(audio), root_names)
    if not new_name:
        return back, None
    return back + f"[sound:{new_name}]", new_name
