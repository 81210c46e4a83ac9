"""Reader for deck files: a YAML document (or Markdown frontmatter) listing card ids."""

import logging
from pathlib import Path
from typing import Any

import yaml

from prepcards.domain.errors import DeckFileError

logger = logging.getLogger(__name__)


def _split_frontmatter(text: str) -> str:
    text = text.lstrip("\ufeff")
    lines = text.split("\n")
    if not lines or lines[0].strip() != "---":
        return text

    for i, line in enumerate(lines[1:], start=1):
        if line.strip() == "---":
            return "\n".join(lines[1:i])
    raise DeckFileError("Frontmatter has no closing '---'")


def parse_deck(text: str) -> list[str]:
    """
    Extract card ids from deck text, preserving file order.

    Accepts `cards:` entries that are either mappings with an `id` key or
    bare id strings. Entries without an id are skipped with a warning.
    """
    raw = _split_frontmatter(text)
    if "\t" in raw:
        raw = raw.replace("\t", "  ")

    try:
        meta: Any = yaml.safe_load(raw) or {}
    except yaml.YAMLError as e:
        raise DeckFileError(f"Deck is not valid YAML: {e}") from e

    if not isinstance(meta, dict):
        raise DeckFileError("Deck must be a mapping with a 'cards' list")

    cards = meta.get("cards", [])
    if not isinstance(cards, list):
        raise DeckFileError("'cards' must be a list")

    card_ids: list[str] = []
    for index, card in enumerate(cards):
        if isinstance(card, str):
            card_id = card
        elif isinstance(card, dict) and card.get("id"):
            card_id = str(card["id"])
        else:
            logger.warning(f"Skipping card #{index + 1}: no id")
            continue
        card_ids.append(card_id)

    return card_ids


def load_deck_card_ids(path: Path) -> list[str]:
    """Read a deck file and return its card ids."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DeckFileError(f"Cannot read deck {path}: {e}") from e
    card_ids = parse_deck(text)
    logger.debug(f"Loaded {len(card_ids)} cards from {path}")
    return card_ids
