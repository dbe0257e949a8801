"""
Topic Bingo: command line entry point
-------------------------------------

Manage the topic pool, shorten topics with AI and play a card from the
terminal. State is kept in the configured preference store, so a card
survives between runs.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from topicbingo.card import BingoCard
from topicbingo.config import SettingsManager, TopicLanguage
from topicbingo.services import (
    AIConfig,
    CardPersistence,
    SettingsCredentialStore,
    ShorteningService,
    StorageBackend,
    StoreUnavailableError,
    TopicPersistence,
    TopicStore,
    create_preference_store,
)
from topicbingo.services.ai_service import DEFAULT_MODELS, resolve_provider
from topicbingo.utils import setup_logger

logger = logging.getLogger("topicbingo.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play topic bingo in the terminal.")
    parser.add_argument("--add", metavar="FILE", help="add topics from a text file, one per line")
    parser.add_argument("--clear-topics", action="store_true", help="remove all topics")
    parser.add_argument("--api-key", help="save the AI provider API key")
    parser.add_argument("--shorten", action="store_true", help="shorten topics with AI")
    parser.add_argument("--language", help="language for short topics (english, german, swedish)")
    parser.add_argument("--new-game", action="store_true", help="generate a new card")
    parser.add_argument("--toggle", nargs=2, type=int, action="append", metavar=("ROW", "COL"),
                        help="toggle a tile (0-based), may be repeated")
    parser.add_argument("--reset", action="store_true", help="uncheck every tile")
    parser.add_argument("--verbose", action="store_true", help="debug logging")
    return parser


def render_card(card: BingoCard, width: int = 16) -> str:
    """Render the card as a text grid; checked tiles are marked with [x]."""
    if card.is_empty:
        return "(no card yet - add topics and start a new game)"
    lines = []
    for row in card.tiles:
        cells = []
        for tile in row:
            mark = "[x]" if tile.is_checked else "[ ]"
            label = tile.topic.display_text[:width - 4]
            cells.append(f"{mark} {label}".ljust(width))
        lines.append(" | ".join(cells))
    if card.has_won:
        lines.append("")
        lines.append("Bingo! You completed a bingo. Nicely done!")
    return "\n".join(lines)


def build_ai_config(settings: SettingsManager) -> AIConfig:
    provider = resolve_provider(settings.get("AI_PROVIDER"))
    return AIConfig(
        provider=provider,
        model=settings.get("AI_MODEL") or DEFAULT_MODELS[provider],
        base_url=settings.get("AI_BASE_URL") or None,
        timeout=settings.get("AI_TIMEOUT"),
        max_tokens=settings.get("AI_MAX_TOKENS"),
    )


async def main(argv: Optional[List[str]] = None) -> bool:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logger(level=logging.DEBUG if args.verbose else logging.INFO)

    settings = SettingsManager()
    try:
        backend = StorageBackend(settings.get("STORAGE_BACKEND", "json"))
    except ValueError:
        logger.warning("Unknown storage backend, using JSON")
        backend = StorageBackend.JSON
    path_key = "PREFERENCES_DB" if backend == StorageBackend.SQLITE else "PREFERENCES_FILE"
    preferences = create_preference_store(backend, settings.get(path_key))

    store = TopicStore(persistence=TopicPersistence(preferences))
    card = BingoCard(persistence=CardPersistence(preferences))
    language = TopicLanguage.from_name(args.language) if args.language else settings.language

    if args.clear_topics:
        store.clear_topics()

    if args.add:
        topic_file = Path(args.add)
        if not topic_file.exists():
            logger.error("%s not found", topic_file)
            return False
        added = store.add_topics(topic_file.read_text(encoding="utf-8"))
        logger.info("Added %d topics (%d total)", len(added), store.count)

    service = ShorteningService(
        SettingsCredentialStore(settings.get("CREDENTIALS_FILE")),
        ai_config=build_ai_config(settings),
    )
    try:
        if args.api_key:
            try:
                service.save_api_key(args.api_key)
            except StoreUnavailableError as e:
                logger.error(e.message)
                return False

        if args.shorten:
            if not await service.shorten_store(store, language):
                if service.last_error is not None:
                    logger.error(service.last_error.message)
                    return False
            else:
                logger.info("Updated short titles for %d topics.", store.count)
    finally:
        await service.close()

    fresh_card = args.new_game or not settings.get("RESTORE_LAST_CARD", True)
    if fresh_card or (card.is_empty and not store.is_empty):
        card.generate_card(store.topics)

    if args.reset:
        card.reset_card()

    for row, col in args.toggle or []:
        card.toggle_tile(row, col)

    print(render_card(card))
    return True


def run() -> None:
    try:
        success = asyncio.run(main())
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n[!] Aborted by user.")
        sys.exit(1)


if __name__ == "__main__":
    run()
