"""Tests for notion_to_anki.media."""

import hashlib

import pytest

from notion_to_anki.media import (
    suffix,
    new_unique_file_name,
    resolve,
    embed_file,
    embed_images,
    embed_audio,
)


# ── suffix ───────────────────────────────────────────────────────────────

class TestSuffix:
    def test_simple(self):
        assert suffix("img/photo.png") == ".png"

    def test_case_insensitive(self):
        assert suffix("photo.JPEG") == ".JPEG"

    def test_no_extension(self):
        assert suffix("img/photo") is None

    def test_empty(self):
        assert suffix("") is None
        assert suffix(None) is None


# ── new_unique_file_name ─────────────────────────────────────────────────

class TestNewUniqueFileName:
    def test_sha1_of_path(self):
        expected = hashlib.sha1(b"img/photo.png").hexdigest()
        assert new_unique_file_name("img/photo.png") == expected

    def test_deterministic(self):
        assert new_unique_file_name("a.png") == new_unique_file_name("a.png")

    def test_different_paths(self):
        assert new_unique_file_name("a.png") != new_unique_file_name("b.png")


# ── resolve ──────────────────────────────────────────────────────────────

class TestResolve:
    def test_direct_key(self):
        assert resolve({"img/a.png": b"a"}, "img/a.png", ["Root"]) == b"a"

    def test_under_root_folder(self):
        files = {"Root/img/photo.png": b"p"}
        assert resolve(files, "./img/photo.png", ["Root"]) == b"p"

    def test_parent_segments_dropped(self):
        files = {"Root/img/photo.png": b"p"}
        assert resolve(files, "../img/photo.png", ["Root"]) == b"p"

    def test_second_root_name(self):
        files = {"Root abc123/img.png": b"p"}
        assert resolve(files, "img.png", ["📚 Root", "Root abc123"]) == b"p"

    def test_missing(self):
        assert resolve({}, "img/a.png", ["Root"]) is None

    def test_empty_file_is_found(self):
        assert resolve({"Root/a.png": b""}, "a.png", ["Root"]) == b""


# ── embed_file ───────────────────────────────────────────────────────────

class TestEmbedFile:
    def test_registers_hashed_name(self, mock_exporter):
        files = {"Root/img/photo.png": b"p"}
        name = embed_file(mock_exporter, files, "./img/photo.png", ["Root"])

        assert name == new_unique_file_name("./img/photo.png") + ".png"
        mock_exporter.add_media.assert_called_once_with(name, b"p")

    def test_same_path_same_name(self, mock_exporter):
        files = {"a.png": b"a"}
        first = embed_file(mock_exporter, files, "a.png", ["Root"])
        second = embed_file(mock_exporter, files, "a.png", ["Root"])
        assert first == second

    def test_no_suffix_never_embedded(self, mock_exporter):
        files = {"README": b"x"}
        assert embed_file(mock_exporter, files, "README", ["Root"]) is None
        mock_exporter.add_media.assert_not_called()

    def test_missing_logged(self, mock_exporter, capsys):
        assert embed_file(mock_exporter, {}, "gone.png", ["Root"]) is None
        assert "Missing relative path to gone.png" in capsys.readouterr().out
        mock_exporter.add_media.assert_not_called()


# ── embed_images ─────────────────────────────────────────────────────────

class TestEmbedImages:
    def test_rewrites_src(self, mock_exporter):
        files = {"Root/img/photo.png": b"p"}
        back, names, count = embed_images('<p><img src="./img/photo.png"/></p>', mock_exporter, files, ["Root"])

        expected = new_unique_file_name("./img/photo.png") + ".png"
        assert names == [expected]
        assert count == 1
        assert f'src="{expected}"' in back

    def test_url_decoded(self, mock_exporter):
        files = {"Root/my img.png": b"p"}
        _, names, _ = embed_images('<img src="my%20img.png"/>', mock_exporter, files, ["Root"])
        assert names == [new_unique_file_name("my img.png") + ".png"]

    def test_remote_images_counted_not_embedded(self, mock_exporter):
        back = '<img src="https://example.com/a.png"/><img src="missing.png"/>'
        result, names, count = embed_images(back, mock_exporter, {}, ["Root"])
        assert names == []
        assert count == 2
        assert "https://example.com/a.png" in result

    def test_no_images_untouched(self, mock_exporter):
        back = "<p>text &amp; more</p>"
        assert embed_images(back, mock_exporter, {}, ["Root"]) == (back, [], 0)


# ── embed_audio ──────────────────────────────────────────────────────────

class TestEmbedAudio:
    def test_sound_tag_appended(self, mock_exporter):
        files = {"Root/audio/word.mp3": b"mp3"}
        back, name = embed_audio('<a href="audio/word.mp3">word</a>', mock_exporter, files, ["Root"])

        assert name == new_unique_file_name("audio/word.mp3") + ".mp3"
        assert back.endswith(f"[sound:{name}]")
        assert back.startswith('<a href="audio/word.mp3">')

    def test_missing_audio(self, mock_exporter):
        back = '<a href="word.mp3">word</a>'
        assert embed_audio(back, mock_exporter, {}, ["Root"]) == (back, None)

    def test_no_audio(self, mock_exporter):
        assert embed_audio("<p>x</p>", mock_exporter, {}, ["Root"]) == ("<p>x</p>", None)
