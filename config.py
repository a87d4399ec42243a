"""
Configuration management.

Holds the recognized deck options (``Settings``), loads/saves the
config.json file, and resolves the workspace base directory that
builds write their scratch files into.
"""

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path

# Config lives next to the package
CONFIG_FILE = Path(__file__).resolve().parent / "config.json"

WORKSPACE_ENV = "WORKSPACE_BASE"


class ConfigurationError(Exception):
    """Raised when the build environment is not configured."""


# camelCase / dashed option names from the upload form → Settings fields
OPTION_ALIASES = {
    "deckName": "deck_name",
    "isCherry": "is_cherry",
    "cherry": "is_cherry",
    "isAll": "is_all",
    "all": "is_all",
    "toggleMode": "toggle_mode",
    "toggle-mode": "toggle_mode",
    "maxOne": "max_one",
    "max-one-toggle-per-card": "max_one",
    "isTextOnlyBack": "is_text_only_back",
    "paragraph": "is_text_only_back",
    "noUnderline": "no_underline",
    "no-underline": "no_underline",
    "fontSize": "font_size",
    "font-size": "font_size",
    "useInput": "use_input",
    "enable-input": "use_input",
    "isCloze": "is_cloze",
    "cloze": "is_cloze",
    "useTags": "use_tags",
    "tags": "use_tags",
    "basicReversed": "basic_reversed",
    "basic-reversed": "basic_reversed",
    "reversed": "reversed",
    "isEmptyDescription": "is_empty_description",
    "no-deck-desc": "is_empty_description",
    "clozeModelName": "cloze_model_name",
    "clozeModelId": "cloze_model_id",
    "basicModelName": "basic_model_name",
    "basicModelId": "basic_model_id",
    "inputModelName": "input_model_name",
    "inputModelId": "input_model_id",
    "template": "template",
}

TOGGLE_MODES = ("open_toggle", "close_toggle", "")


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "on", "yes", "1")
    return bool(value)


@dataclass(frozen=True)
class Settings:
    """Options recognized by the parser and the build pipeline."""
    deck_name: str = ""
    is_cherry: bool = False
    is_all: bool = False
    toggle_mode: str = "close_toggle"
    max_one: bool = False
    is_text_only_back: bool = False
    no_underline: bool = False
    font_size: str = ""
    use_input: bool = False
    is_cloze: bool = True
    use_tags: bool = True
    basic_reversed: bool = False
    reversed: bool = False
    is_empty_description: bool = False
    cloze_model_name: str = "n2a-cloze"
    cloze_model_id: int = 998877661
    basic_model_name: str = "n2a-basic"
    basic_model_id: int = 2020
    input_model_name: str = "n2a-input"
    input_model_id: int = 6394002335189144856
    template: str = "specialstyle"

    @classmethod
    def from_dict(cls, options: dict | None) -> "Settings":
        """
        Build Settings from a dict of options.

        Accepts snake_case field names and the camelCase / dashed names
        used by the upload form. Unknown keys are ignored.
        """
        known = {f.name: f for f in fields(cls)}
        values = {}
        for key, value in (options or {}).items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known or value is None:
                continue
            default = known[name].default
            if isinstance(default, bool):
                value = _to_bool(value)
            elif isinstance(default, int):
                value = int(value)
            else:
                value = str(value)
            values[name] = value

        if values.get("toggle_mode") not in (None, *TOGGLE_MODES):
            print(f"[config] WARNING: unknown toggle mode '{values['toggle_mode']}' — leaving toggles as exported")
            values["toggle_mode"] = ""

        return cls(**values)


def load() -> dict:
    """Load config from config.json. Returns empty dict if not found."""
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            return json.load(f)
    return {}


def save(config: dict) -> None:
    """Save config to config.json."""
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2, ensure_ascii=False)


def load_settings(path: str | Path | None = None, overrides: dict | None = None) -> Settings:
    """
    Resolve the deck options for a build.

    Priority (highest first):
    1. *overrides* (CLI flags)
    2. The JSON file at *path*
    3. Saved config.json
    """
    options = dict(load())

    if path:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")
        with open(path, "r", encoding="utf-8") as f:
            options.update(json.load(f))
        print(f"[config] Loaded options from {path.name}")

    options.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return Settings.from_dict(options)


def get_workspace_base(cli_override: str = None) -> str:
    """
    Get the workspace base directory.

    Priority:
    1. CLI argument (--workspace)
    2. WORKSPACE_BASE environment variable

    Raises ConfigurationError when neither is set.
    """
    if cli_override:
        print(f"[config] Workspace set via CLI: {cli_override}")
        return cli_override

    base = os.environ.get(WORKSPACE_ENV)
    if not base:
        raise ConfigurationError(f"Undefined workspace — set {WORKSPACE_ENV} or pass --workspace")
    return base
