"""
Anki package generation.

Turns the processed deck list into genanki decks and notes and writes
a single .apkg file (decks, notes and media) inside the build workspace.
"""

from __future__ import annotations

from pathlib import Path

import genanki

from .parser import Deck, Note
from .transforms import INPUT_TOKEN

STYLE_FILE = "deck_style.css"
PACKAGE_FILE = "deck.apkg"

BASE_CSS = """.card {
  font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Helvetica, Arial, sans-serif;
  text-align: left;
}
"""


def _model_css(template: str, page_css: str) -> str:
    """CSS for the note models, depending on the chosen template."""
    if template == "nostyle":
        return ""
    if template == "notionstyle":
        return page_css
    return BASE_CSS + page_css


def build_models(models: dict, css: str) -> dict[str, genanki.Model]:
    """Create the basic, cloze and input models from the root deck's model info."""
    basic = genanki.Model(
        int(models.get("basic_model_id", 2020)),
        models.get("basic_model_name", "n2a-basic"),
        fields=[{"name": "Front"}, {"name": "Back"}],
        templates=[{
            "name": "Card 1",
            "qfmt": "{{Front}}",
            "afmt": "{{FrontSide}}<hr id=answer>{{Back}}",
        }],
        css=css,
    )
    cloze = genanki.Model(
        int(models.get("cloze_model_id", 998877661)),
        models.get("cloze_model_name", "n2a-cloze"),
        fields=[{"name": "Text"}, {"name": "Back Extra"}],
        templates=[{
            "name": "Cloze",
            "qfmt": "{{cloze:Text}}",
            "afmt": "{{cloze:Text}}<br>{{Back Extra}}",
        }],
        css=css,
        model_type=genanki.Model.CLOZE,
    )
    input_model = genanki.Model(
        int(models.get("input_model_id", 6394002335189144856)),
        models.get("input_model_name", "n2a-input"),
        fields=[{"name": "Front"}, {"name": "Back"}, {"name": "Input"}, {"name": "FrontAfter"}],
        templates=[{
            "name": "Card 1",
            "qfmt": "{{Front}}{{type:Input}}{{FrontAfter}}",
            "afmt": "{{Front}}{{type:Input}}{{FrontAfter}}<hr id=answer>{{Back}}",
        }],
        css=css,
    )
    return {"basic": basic, "cloze": cloze, "input": input_model}


def split_input_front(front: str) -> tuple[str, str]:
    """
    Split an input front at its first typed-answer field.

    The model renders the field between the two halves, so it stays where
    the bold text was. Any further fields are dropped, Anki allows one.
    """
    before, _, after = front.partition(INPUT_TOKEN)
    return before, after.replace(INPUT_TOKEN, "")


def card_kind(card: Note) -> str:
    """'cloze', 'input' or 'basic'."""
    if card.cloze and "{{c" in card.front:
        return "cloze"
    if card.answer:
        return "input"
    return "basic"


def _description(deck: Deck) -> str:
    if deck.empty_description:
        return ""
    parts = []
    if deck.image:
        parts.append(f"<img src='{deck.image}'>")
    parts.append(f"<p>{deck.card_count} cards</p>")
    return "".join(parts)


class AnkiExporter:
    """Collects media and decks for one build and writes the package."""

    def __init__(self, first_deck_name: str, workspace: str | Path):
        self.first_deck_name = first_deck_name
        self.workspace = Path(workspace)
        self.media_files: dict[str, Path] = {}
        self.decks: list[genanki.Deck] = []

    def _page_css(self) -> str:
        css_file = self.workspace / STYLE_FILE
        if css_file.exists():
            return css_file.read_text(encoding="utf-8")
        return ""

    def add_media(self, name: str, data) -> None:
        """Write *data* into the workspace so it can be packaged as *name*."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        path = self.workspace / name
        path.write_bytes(data)
        self.media_files[name] = path
        print(f"[export] Media added: {name}")

    def _to_note(self, card: Note, models: dict[str, genanki.Model]) -> genanki.Note:
        kind = card_kind(card)
        if kind == "cloze":
            fields = [card.front, card.back]
        elif kind == "input":
            before, after = split_input_front(card.front)
            fields = [before, card.back, card.answer, after]
        else:
            fields = [card.front, card.back]
        return genanki.Note(
            model=models[kind],
            fields=fields,
            tags=list(card.tags),
            due=card.number,
        )

    def configure(self, decks: list[Deck]) -> None:
        """Build genanki decks from the processed payload (root deck first)."""
        if not decks:
            raise ValueError("Nothing to export: no decks")

        root = decks[0]
        css = _model_css(root.models.get("template", "specialstyle"), self._page_css())
        models = build_models(root.models, css)

        self.decks = []
        for deck in decks:
            anki_deck = genanki.Deck(deck.id, deck.name, description=_description(deck))
            for card in deck.cards:
                anki_deck.add_note(self._to_note(card, models))
            self.decks.append(anki_deck)
            print(f"[export] Deck '{deck.name}': {len(deck.cards)} card(s)")

    def save(self) -> bytes:
        """Write the package into the workspace and return its bytes."""
        output = self.workspace / PACKAGE_FILE
        package = genanki.Package(self.decks)
        package.media_files = [str(p) for p in self.media_files.values()]
        package.write_to_file(str(output))
        print(f"[export] Created: {output.name} ({len(self.media_files)} media file(s))")
        return output.read_bytes()
