"""Shared fixtures for notion_to_anki tests."""

import pytest
from unittest.mock import MagicMock

from notion_to_anki.config import Settings
from notion_to_anki.parser import Deck, Note


# ---------------------------------------------------------------------------
# HTML fixtures
# ---------------------------------------------------------------------------

def _toggle(front, back, cls="toggle"):
    return (
        f'<ul class="{cls}"><li><details open="">'
        f"<summary>{front}</summary>{back}"
        "</details></li></ul>"
    )


def _link(href, text):
    return f'<figure class="link-to-page"><a href="{href}">{text}</a></figure>'


def _page(title, body="", style="", icon=None):
    icon_html = (
        f'<div class="page-header-icon"><span class="icon">{icon}</span></div>'
        if icon else ""
    )
    return (
        "<html><head>"
        f"<title>{title}</title><style>{style}</style>"
        "</head><body><article class=\"page\"><header>"
        f'{icon_html}<h1 class="page-title">{title}</h1>'
        f'</header><div class="page-body">{body}</div></article></body></html>'
    )


@pytest.fixture
def toggle():
    """Build a top-level toggle list: toggle(front, back_html, cls='toggle')."""
    return _toggle


@pytest.fixture
def link():
    """Build a link-to-page block: link(href, text)."""
    return _link


@pytest.fixture
def page():
    """Build an exported page: page(title, body='', style='', icon=None)."""
    return _page


@pytest.fixture
def sample_files():
    """A root page linking to two chapters, with one image."""
    root = _page(
        "Root",
        _toggle("Q1", "<p>A1</p>")
        + _link("Root/Chapter1.html", "Chapter1")
        + _link("Root/Chapter2.html", "Chapter2"),
    )
    chapter1 = _page(
        "Chapter1",
        _toggle("<code>Paris</code> is the capital of?", "<p>France</p>"),
    )
    chapter2 = _page(
        "Chapter2",
        _toggle("Photo?", '<p><img src="./img/photo.png"></p>'),
    )
    return {
        "Root.html": root,
        "Root/Chapter1.html": chapter1,
        "Root/Chapter2.html": chapter2,
        "Root/img/photo.png": b"\x89PNG fake image data",
    }


# ---------------------------------------------------------------------------
# Settings / model fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def settings_factory():
    """Settings(**overrides), defaults otherwise."""

    def _make(**overrides):
        return Settings(**overrides)

    return _make


@pytest.fixture
def deck_factory():
    """Factory for Deck objects holding simple notes."""

    def _make(name="Root", cards=None, global_tags=None, style=None):
        return Deck(
            name=name,
            cards=cards if cards is not None else [Note(front="Q1", back="A1")],
            style=style,
            global_tags=global_tags or [],
        )

    return _make


# ---------------------------------------------------------------------------
# Mock exporter
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_exporter():
    """Return a MagicMock mimicking AnkiExporter."""
    exporter = MagicMock()
    exporter.save.return_value = b"apkg-bytes"
    return exporter


@pytest.fixture
def exporter_factory(mock_exporter):
    """Exporter factory that always hands back ``mock_exporter``."""
    return MagicMock(return_value=mock_exporter)
