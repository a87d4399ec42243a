"""
Per-card text rewrites.

Each transform parses the card HTML, edits the matching elements in
place and serializes once at the end, so two identical spans are
handled as two separate elements.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

INPUT_TOKEN = "{{type:Input}}"


def _fragment(html: str) -> BeautifulSoup:
    return BeautifulSoup(html or "", "html.parser")


# ---------------------------------------------------------------------------
# Cloze
# ---------------------------------------------------------------------------

def is_hand_numbered(inner: str) -> bool:
    """True when the author already wrote a full {{cN::...}} inside the code span."""
    # KaTeX output like \frac{{c}} is not a cloze
    return "{{c" in inner and "}}" in inner and "KaTex" not in inner


def handle_cloze_deletions(html: str) -> str:
    """
    Turn every <code> span into a numbered cloze deletion.

    Numbers start at 1 and follow document order. Spans that already
    contain a hand-written cloze keep their number and only lose the
    <code> wrapper.
    """
    soup = _fragment(html)
    codes = soup.find_all("code")
    if not codes:
        return html

    num = 1
    for code in codes:
        inner = code.decode_contents()
        if not inner:
            continue

        if is_hand_numbered(inner):
            code.unwrap()
            continue

        # Anki closes the cloze at the first }} it sees
        for text in code.find_all(string=True):
            if "}}" in text:
                text.replace_with(text.replace("}}", "} }"))

        code.insert_before("{{c%d::" % num)
        code.insert_after("}}")
        code.unwrap()
        num += 1

    return str(soup)


# ---------------------------------------------------------------------------
# Bold → input
# ---------------------------------------------------------------------------

def treat_bold_as_input(html: str, inline: bool) -> tuple[str, str]:
    """
    Rewrite <strong> spans.

    With ``inline=False`` each span becomes the ``{{type:Input}}`` field and
    the inner markup of the last one is returned as the expected answer.
    With ``inline=True`` the spans are unwrapped, keeping their content.

    Returns ``(html, answer)``.
    """
    soup = _fragment(html)
    spans = soup.find_all("strong")
    if not spans:
        return html, ""

    answer = ""
    for strong in spans:
        inner = strong.decode_contents()
        if not inner:
            continue
        if inline:
            strong.unwrap()
        else:
            if strong.find_parent("strong") is not None:
                continue
            strong.replace_with(INPUT_TOKEN)
        answer = inner
    return str(soup), answer


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

def split_tags(text: str) -> list[str]:
    """'Biology, Cell cycle' → ['Biology', 'Cell-cycle']"""
    tags = []
    for part in text.split(","):
        tag = re.sub(r"\s", "-", part.strip())
        if tag:
            tags.append(tag)
    return tags


def _take_deletions(html: str) -> tuple[str, list[str]]:
    soup = _fragment(html)
    tags = []
    outermost = [d for d in soup.find_all("del") if d.find_parent("del") is None]
    if not outermost:
        return html, tags
    for deletion in outermost:
        tags.extend(split_tags(deletion.get_text()))
        deletion.decompose()
    return str(soup), tags


def locate_tags(note, global_tags: list[str] | None = None):
    """
    Move strikethrough spans from the note's front and back into its tags,
    then add the page-level tags. Duplicates are kept.
    """
    if note.front:
        note.front, tags = _take_deletions(note.front)
        note.tags.extend(tags)
    if note.back:
        note.back, tags = _take_deletions(note.back)
        note.tags.extend(tags)

    for text in global_tags or []:
        note.tags.extend(split_tags(text))

    return note
