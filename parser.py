"""
HTML page and flashcard parsing.

Walks an exported page tree (a mapping of relative file names to HTML),
extracts one note per toggle, and builds a flat, depth-first list of
decks whose names encode the page hierarchy (``Parent::Child``).
"""

from __future__ import annotations

import copy
import random
import re
import string
from dataclasses import dataclass, field
from urllib.parse import unquote

from bs4 import BeautifulSoup

from .config import Settings
from .text import replace_all

CHERRY = "🍒"
CHERRY_ENTITY = "&#x1F352;"

CSS_COMMENT_RE = re.compile(r'/\*.*?\*/', re.DOTALL)


@dataclass
class Note:
    """One flashcard candidate extracted from a toggle."""
    front: str
    back: str
    tags: list[str] = field(default_factory=list)
    media: list[str] = field(default_factory=list)
    number: int = 0
    cloze: bool = False
    answer: str | None = None


@dataclass
class Deck:
    """A deck built from one page. ``name`` is the full ``::`` path."""
    name: str
    cards: list[Note]
    image: str | None = None
    style: str | None = None
    id: int = 0
    global_tags: list[str] = field(default_factory=list)
    card_count: int = 0
    image_count: int = 0
    empty_description: bool = False
    # Only set on the root deck
    models: dict = field(default_factory=dict)

    def clean_style(self) -> str:
        """Return the page CSS without comments or blank lines."""
        if not self.style:
            return ""
        css = CSS_COMMENT_RE.sub("", self.style)
        return "\n".join(line.rstrip() for line in css.splitlines() if line.strip())


def generate_id() -> int:
    """Random 16 digit numeric id."""
    return int("".join(random.choices(string.digits, k=16)))


def _as_text(contents) -> str:
    if isinstance(contents, bytes):
        return contents.decode("utf-8", errors="replace")
    return contents or ""


# ---------------------------------------------------------------------------
# Sanitizer
# ---------------------------------------------------------------------------

def has_cloze_deletions(text: str | None) -> bool:
    """Coarse check: cloze numbering happens later, this only looks for code spans."""
    if not text:
        return False
    return "code" in text


def valid_input_card(note: Note, settings: Settings) -> bool:
    if not settings.use_input:
        return False
    return bool(note.front) and "strong" in note.front


def sanity_check(notes: list[Note], settings: Settings) -> list[Note]:
    """Drop notes that cannot become a usable card."""
    return [
        n for n in notes
        if n.front and (has_cloze_deletions(n.front) or n.back or valid_input_card(n, settings))
    ]


def note_has_cherry(note: Note) -> bool:
    return any(
        marker in text
        for marker in (CHERRY, CHERRY_ENTITY)
        for text in (note.front, note.back)
    )


# ---------------------------------------------------------------------------
# Toggle helpers
# ---------------------------------------------------------------------------

def remove_nested_toggles(html: str) -> str:
    """Strip nested toggles from a back and drop the containers they leave empty."""
    soup = BeautifulSoup(html, "html.parser")
    for node in soup.find_all(["details", "summary"]):
        node.decompose()

    # Reverse document order visits children before their parents
    for node in reversed(soup.find_all(["li", "ul", "p"])):
        if not node.find(True) and not node.get_text(strip=True):
            node.decompose()

    return str(soup)


def _class_string(node) -> str:
    classes = node.get("class") or []
    if isinstance(classes, str):
        return classes
    return " ".join(classes)


def _add_classes(node, classes: list[str]) -> None:
    current = node.get("class") or []
    node["class"] = current + [c for c in classes if c not in current]


class DeckParser:
    """
    Parse the page tree rooted at *file_name* into ``payload``, a list of
    decks in depth-first order (root first).
    """

    def __init__(self, file_name: str, settings: Settings, files: dict):
        self.settings = settings
        self.files = files or {}
        self.file_name = file_name
        # Pages on the current link path; a link back into it is a cycle
        self._ancestors: set[str] = {file_name}
        self.payload = self.handle_html(
            file_name, self.files[file_name], settings.deck_name, []
        )

    @property
    def name(self) -> str:
        return self.payload[0].name

    # -- page level ---------------------------------------------------------

    def set_font_size(self, style: str) -> str:
        font_size = self.settings.font_size
        # 20px is the export default, leave it alone
        if font_size and font_size != "20px":
            font_size = font_size if font_size.strip().endswith("px") else font_size + "px"
            style += "\n" + "* { font-size:" + font_size + "}"
        return style

    def find_toggle_lists(self, soup: BeautifulSoup) -> list:
        if self.settings.is_cherry or self.settings.is_all:
            return soup.select(".toggle")
        return soup.select(".page-body > ul")

    def find_next_page(self, href: str | None) -> str | None:
        """
        Resolve a link target to a file-set key.

        Exact matches win, otherwise the first key (in file-set order)
        containing the decoded target is used.
        """
        if not href:
            print(f"[parser] Skipping next page, href is {href!r}")
            return None

        target = unquote(href)
        if target in self.files:
            return target
        for key in self.files:
            if target in key:
                return key

        print(f"[parser] WARNING: Linked page not found: {target}")
        return None

    def _apply_toggle_mode(self, soup: BeautifulSoup) -> None:
        mode = self.settings.toggle_mode
        if mode == "open_toggle":
            for details in soup.find_all("details"):
                details["open"] = ""
        elif mode == "close_toggle":
            for details in soup.find_all("details"):
                details.attrs.pop("open", None)

    def _page_icon(self, soup: BeautifulSoup) -> str | None:
        icon = soup.select_one(".page-header-icon > .icon")
        if icon is None:
            return None
        return icon.decode_contents() or None

    def _with_icon(self, name: str, icon: str) -> str:
        """Put the page icon in front of the last segment of *name*."""
        names = name.split("::")
        if names[-1].startswith(icon):
            return name
        names[-1] = f"{icon} {names[-1]}"
        return "::".join(names)

    # -- toggles ------------------------------------------------------------

    def extract_note(self, toggle) -> Note | None:
        """Build a note from one toggle candidate, or None if it has no usable pair."""
        parent_class = _class_string(toggle)
        if parent_class:
            for node in toggle.find_all(["details", "summary"]):
                _add_classes(node, parent_class.split())

        summary = toggle.find("summary")
        details = toggle.find("details")
        if summary is None or not summary.get_text() or details is None:
            return None
        if self.settings.max_one and not details.get_text():
            return None

        inner = summary.decode_contents()
        front = f"<div class='{parent_class}'>{inner}</div>" if parent_class else inner

        if not details.decode_contents():
            return None

        if self.settings.is_text_only_back:
            back = "".join(p.decode_contents() for p in details.find_all("p", recursive=False))
        else:
            body = copy.copy(details)
            first = body.find("summary")
            if first is not None:
                first.decompose()
            back = body.decode_contents()

        if self.settings.max_one:
            back = remove_nested_toggles(back)

        note = Note(front=front, back=back)
        if self.settings.is_cherry and not note_has_cherry(note):
            print("[parser] Dropping due to cherry rules")
        return note

    # -- recursion ----------------------------------------------------------

    def handle_html(self, file_name: str, contents, deck_name: str, decks: list[Deck]) -> list[Deck]:
        """Parse one page into a deck, then recurse into its linked subpages."""
        contents = _as_text(contents)
        if self.settings.no_underline:
            contents = replace_all(contents, "border-bottom:0.05em solid", "")
        soup = BeautifulSoup(contents, "html.parser")

        title = soup.find("title")
        name = deck_name or (title.get_text() if title else "")

        style = None
        style_tag = soup.find("style")
        if style_tag is not None and style_tag.get_text():
            style = replace_all(style_tag.get_text(), "white-space: pre-wrap;", "")
            style = self.set_font_size(style)

        image = None
        cover = soup.select_one(".page-cover-image")
        if cover is not None:
            image = cover.get("src")

        icon = self._page_icon(soup)
        if icon and icon not in name and not decks:
            name = self._with_icon(name, icon)

        global_tags = [d.get_text() for d in soup.select(".page-body > p > del")]

        self._apply_toggle_mode(soup)
        notes = [self.extract_note(t) for t in self.find_toggle_lists(soup)]
        notes = sanity_check([n for n in notes if n], self.settings)

        print(f"[parser] Deck '{name}': {len(notes)} note(s)")
        decks.append(Deck(
            name=name,
            cards=notes,
            image=image,
            style=style,
            id=generate_id(),
            global_tags=global_tags,
        ))

        for page in soup.select(".link-to-page"):
            ref = page.find("a")
            key = self.find_next_page(ref.get("href") if ref else None)
            if key is None or not name:
                continue
            if key in self._ancestors:
                print(f"[parser] WARNING: '{key}' links back to one of its parents — skipping to avoid a cycle")
                continue

            page_content = self.files[key]
            sub_name = ref.get_text().strip()
            if not sub_name:
                linked_title = BeautifulSoup(_as_text(page_content), "html.parser").find("title")
                sub_name = linked_title.get_text().strip() if linked_title else ""
            self._ancestors.add(key)
            try:
                self.handle_html(key, page_content, f"{name}::{sub_name}", decks)
            finally:
                self._ancestors.discard(key)

        return decks
