"""
Export loading.

Reads an exported page tree (a .zip archive, a folder, or a single HTML
page) into a ``{relative path: content}`` mapping. HTML pages are decoded
to text, everything else (images, audio) stays as bytes.
"""

import zipfile
from pathlib import Path

HTML_SUFFIXES = (".html", ".htm")
SKIP_NAMES = {".DS_Store", "__MACOSX"}


def _is_html(name: str) -> bool:
    return name.lower().endswith(HTML_SUFFIXES)


def _decode(name: str, data: bytes):
    if _is_html(name):
        return data.decode("utf-8", errors="replace")
    return data


def _skipped(parts) -> bool:
    return any(part in SKIP_NAMES for part in parts)


def load_file_set(path: str | Path) -> dict:
    """Load an export into a mapping of relative paths (with '/') to content."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Export not found: {path}")

    files = {}
    if path.is_dir():
        for f in sorted(path.rglob("*")):
            rel = f.relative_to(path)
            if f.is_file() and not _skipped(rel.parts):
                files[rel.as_posix()] = _decode(f.name, f.read_bytes())
    elif zipfile.is_zipfile(path):
        with zipfile.ZipFile(path) as archive:
            for info in archive.infolist():
                if info.is_dir() or _skipped(info.filename.split("/")):
                    continue
                files[info.filename] = _decode(info.filename, archive.read(info))
    else:
        files[path.name] = _decode(path.name, path.read_bytes())

    pages = sum(1 for name in files if _is_html(name))
    print(f"[files] Loaded {len(files)} file(s), {pages} page(s) from {path.name}")
    return files


def find_root_file(files: dict) -> str | None:
    """The first top-level HTML page, in name order."""
    top_level = sorted(name for name in files if "/" not in name and _is_html(name))
    if not top_level:
        return None
    return top_level[0]
