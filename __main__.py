"""
CLI entry point.

Usage:
    python -m notion_to_anki <export.zip>
    python -m notion_to_anki <export folder> --output ~/Desktop
    python -m notion_to_anki <page.html> --deck-name "Biology"
    python -m notion_to_anki <export.zip> --config options.json
    python -m notion_to_anki <export.zip> --basic-reversed --use-input
    python -m notion_to_anki <export.zip> --workspace /tmp/n2a
"""

import argparse
import sys
from dataclasses import asdict
from pathlib import Path

from . import __version__
from .builder import prepare_deck
from .config import ConfigurationError, load_settings, save
from .files import find_root_file, load_file_set


def _print_banner(target: str, output: str, settings) -> None:
    """Print a startup banner with run configuration."""
    print()
    print("=" * 60)
    print(f"  Notion → Anki v{__version__}")
    print("=" * 60)
    print(f"  Export:   {target}")
    print(f"  Output:   {output}")
    print(f"  Cloze:    {'YES' if settings.is_cloze else 'no'}")
    print(f"  Tags:     {'YES' if settings.use_tags else 'no'}")
    print(f"  Input:    {'YES' if settings.use_input else 'no'}")
    if settings.basic_reversed:
        print("  Reversed: basic + reversed copies")
    elif settings.reversed:
        print("  Reversed: YES")
    print("=" * 60)
    print()


def _print_summary(result) -> None:
    """Print a summary of the decks that were built."""
    print()
    print("--- Build summary ---")
    for deck in result.decks:
        print(f"  {deck.name}: {len(deck.cards)} cards, {deck.image_count} images")
    print()


def run(
    export_path: str,
    output_dir: str,
    settings,
    workspace: str = None,
) -> Path:
    """Build a package from *export_path* and write it into *output_dir*."""
    _print_banner(export_path, output_dir, settings)

    files = load_file_set(export_path)
    root = find_root_file(files)
    if root is None:
        raise FileNotFoundError(f"No top-level HTML page found in {export_path}")
    print(f"[main] Root page: {root}")

    result = prepare_deck(root, files, settings, workspace_base=workspace)
    _print_summary(result)

    output = Path(output_dir)
    output.mkdir(parents=True, exist_ok=True)
    target = output / result.name.replace("/", "-")
    target.write_bytes(result.apkg)

    print("=" * 60)
    print(f"  Package written: {target}")
    print("=" * 60)
    return target


def main():
    parser = argparse.ArgumentParser(
        prog="notion_to_anki",
        description="Convert an HTML page export (toggles → flashcards, subpages → subdecks) into an Anki .apkg",
    )
    parser.add_argument(
        "path",
        help="Path to the export: a .zip archive, a folder, or a single .html page",
    )
    parser.add_argument(
        "-o", "--output",
        help="Folder to write the .apkg into (default: current folder)",
        default=".",
    )
    parser.add_argument(
        "--deck-name",
        help="Name for the root deck (default: the page title)",
        default=None,
    )
    parser.add_argument(
        "--config",
        help="JSON file with deck options (camelCase or snake_case keys)",
        default=None,
    )
    parser.add_argument(
        "--workspace",
        help="Scratch folder for builds (default: $WORKSPACE_BASE)",
        default=None,
    )
    parser.add_argument(
        "--basic-reversed",
        action="store_true",
        default=None,
        help="Add a reversed copy of every card",
    )
    parser.add_argument(
        "--reversed",
        action="store_true",
        default=None,
        help="Swap front and back of every card",
    )
    parser.add_argument(
        "--use-input",
        action="store_true",
        default=None,
        help="Turn bold text on the front into a typed-answer field",
    )
    parser.add_argument(
        "--no-cloze",
        action="store_false",
        dest="is_cloze",
        default=None,
        help="Keep code spans as code instead of cloze deletions",
    )
    parser.add_argument(
        "--no-tags",
        action="store_false",
        dest="use_tags",
        default=None,
        help="Keep strikethrough text instead of turning it into tags",
    )
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="Remember the resolved options in config.json for later runs",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args()

    overrides = {
        "deck_name": args.deck_name,
        "basic_reversed": args.basic_reversed,
        "reversed": args.reversed,
        "use_input": args.use_input,
        "is_cloze": args.is_cloze,
        "use_tags": args.use_tags,
    }

    try:
        settings = load_settings(args.config, overrides)
        if args.save_config:
            # The deck name belongs to one export, not to later runs
            save({k: v for k, v in asdict(settings).items() if k != "deck_name"})
            print("[config] Options saved to config.json")
        run(args.path, args.output, settings, workspace=args.workspace)
    except (ConfigurationError, FileNotFoundError, KeyError) as e:
        print(f"[error] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
