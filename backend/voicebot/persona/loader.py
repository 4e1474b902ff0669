"""Persona configuration loader."""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml


_DEFAULT_PATH = Path(__file__).parent / "jessica_taylor.yaml"

_FALLBACK_PROMPT = "You are a helpful assistant."


def load_persona(path: Path | None = None) -> dict[str, Any]:
    """Load persona configuration from YAML file.

    Args:
        path: Optional path to persona YAML file.
              Defaults to jessica_taylor.yaml in this directory.

    Returns:
        Dictionary with persona configuration.

    Raises:
        FileNotFoundError: If the persona file does not exist.
        yaml.YAMLError: If the file contains invalid YAML.
    """
    config_path = path or _DEFAULT_PATH

    if not config_path.exists():
        raise FileNotFoundError(f"Persona file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        config: dict[str, Any] = yaml.safe_load(f) or {}

    return config


@lru_cache(maxsize=1)
def _default_persona() -> dict[str, Any]:
    return load_persona()


def get_system_prompt(persona: dict[str, Any] | None = None) -> str:
    """Return the system instruction sent first in every completion request."""
    if persona is None:
        persona = _default_persona()

    return (persona.get("system_prompt") or _FALLBACK_PROMPT).strip()


def get_voice_instructions(persona: dict[str, Any] | None = None) -> str:
    """Return the instructions attached to realtime voice sessions.

    Falls back to the chat system prompt when the persona has no
    voice-specific block.
    """
    if persona is None:
        persona = _default_persona()

    voice = persona.get("voice_instructions")
    if voice:
        return voice.strip()
    return get_system_prompt(persona)
