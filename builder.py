"""
Deck build pipeline.

Runs every card of every parsed deck through a fixed, ordered list of
stages, adds reversed cards, and hands the result to the exporter.

Stage order matters: later stages re-scan text that earlier ones have
already rewritten (e.g. input placeholders are created before tags are
stripped).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path

from . import media
from .config import Settings, get_workspace_base
from .exporter import STYLE_FILE, AnkiExporter
from .parser import Deck, DeckParser, Note, generate_id
from .text import get_soundcloud_url, get_youtube_id, soundcloud_embed, youtube_embed
from .transforms import handle_cloze_deletions, locate_tags, treat_bold_as_input


@dataclass
class BuildContext:
    """What a stage needs besides the card itself."""
    deck: Deck
    settings: Settings
    exporter: object
    files: dict
    root_names: list[str]


@dataclass
class BuildResult:
    name: str
    apkg: bytes
    decks: list[Deck]


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

def stage_cloze(note: Note, ctx: BuildContext) -> None:
    if note.cloze:
        note.front = handle_cloze_deletions(note.front)


def stage_input_front(note: Note, ctx: BuildContext) -> None:
    if ctx.settings.use_input and "<strong" in note.front:
        note.front, answer = treat_bold_as_input(note.front, inline=False)
        note.answer = answer or None


def stage_media(note: Note, ctx: BuildContext) -> None:
    if not note.back:
        return

    note.back, names, image_count = media.embed_images(
        note.back, ctx.exporter, ctx.files, ctx.root_names
    )
    note.media.extend(names)
    ctx.deck.image_count += image_count

    note.back, audio = media.embed_audio(note.back, ctx.exporter, ctx.files, ctx.root_names)
    if audio:
        note.media.append(audio)

    video_id = get_youtube_id(note.back)
    if video_id:
        note.back += youtube_embed(video_id)

    soundcloud_url = get_soundcloud_url(note.back)
    if soundcloud_url:
        note.back += soundcloud_embed(soundcloud_url)


def stage_input_back(note: Note, ctx: BuildContext) -> None:
    if ctx.settings.use_input and note.back and "<strong" in note.back:
        note.back, _ = treat_bold_as_input(note.back, inline=True)


def stage_tags(note: Note, ctx: BuildContext) -> None:
    if ctx.settings.use_tags:
        locate_tags(note, ctx.deck.global_tags)


PIPELINE = (
    ("cloze", stage_cloze),
    ("input_front", stage_input_front),
    ("media", stage_media),
    ("input_back", stage_input_back),
    ("tags", stage_tags),
)


# ---------------------------------------------------------------------------
# Decks
# ---------------------------------------------------------------------------

def reversed_copy(note: Note, number: int) -> Note:
    """Mirror of *note* with front and back swapped."""
    return Note(
        front=note.back,
        back=note.front,
        tags=list(note.tags),
        media=list(note.media),
        number=number,
    )


def process_deck(ctx: BuildContext) -> Deck:
    """Number and transform every card of ``ctx.deck``, then add reversals."""
    deck, settings = ctx.deck, ctx.settings
    deck.empty_description = settings.is_empty_description
    deck.card_count = len(deck.cards)
    deck.image_count = 0
    deck.id = generate_id()

    counter = 0
    for note in deck.cards:
        note.cloze = settings.is_cloze
        note.number = counter
        counter += 1

        for _name, stage in PIPELINE:
            stage(note, ctx)

    duplicates = []
    if settings.basic_reversed:
        for note in deck.cards:
            duplicates.append(reversed_copy(note, counter))
            counter += 1

    if settings.reversed:
        for note in deck.cards:
            note.front, note.back = note.back, note.front

    deck.cards = deck.cards + duplicates
    return deck


def setup_exporter(deck: Deck, name: str, workspace: Path, exporter_factory=AnkiExporter):
    """Create the workspace, write the deck CSS into it and build the exporter."""
    workspace.mkdir(parents=True)
    (workspace / STYLE_FILE).write_text(deck.clean_style(), encoding="utf-8")
    return exporter_factory(name, workspace)


def _root_names(parser: DeckParser) -> list[str]:
    """Folders media may live under: the root deck name, then the root file's stem."""
    return list(dict.fromkeys([parser.name, Path(parser.file_name).stem]))


def build(parser: DeckParser, settings: Settings, workspace_base: str = None, exporter_factory=AnkiExporter) -> bytes:
    """
    Run the card pipeline over every parsed deck and export the package.

    Raises ConfigurationError before touching the disk when no
    workspace base is configured.
    """
    base = get_workspace_base(workspace_base)
    workspace = Path(base) / uuid.uuid4().hex
    exporter = setup_exporter(parser.payload[0], parser.name, workspace, exporter_factory)
    root_names = _root_names(parser)

    print(f"[build] Workspace: {workspace}")
    for deck in parser.payload:
        ctx = BuildContext(
            deck=deck,
            settings=settings,
            exporter=exporter,
            files=parser.files,
            root_names=root_names,
        )
        process_deck(ctx)
        print(f"[build] {deck.name}: {len(deck.cards)} card(s), {deck.image_count} image(s)")

    parser.payload[0].models = {
        "cloze_model_name": settings.cloze_model_name,
        "basic_model_name": settings.basic_model_name,
        "input_model_name": settings.input_model_name,
        "cloze_model_id": settings.cloze_model_id,
        "basic_model_id": settings.basic_model_id,
        "input_model_id": settings.input_model_id,
        "template": settings.template,
    }

    exporter.configure(parser.payload)
    return exporter.save()


def prepare_deck(file_name: str, files: dict, settings: Settings, workspace_base: str = None, exporter_factory=AnkiExporter) -> BuildResult:
    """Parse the page tree rooted at *file_name* and build the package."""
    if file_name not in files:
        raise KeyError(f"Root page not in file set: {file_name}")

    parser = DeckParser(file_name, settings, files)
    apkg = build(parser, settings, workspace_base=workspace_base, exporter_factory=exporter_factory)
    return BuildResult(name=f"{parser.name}.apkg", apkg=apkg, decks=parser.payload)
