"""
Shortening Service - batch conversion of topics into short tile labels.

Wraps the AI service with the credential lookup, single-flight guarding
and error bookkeeping the topic editor needs. Provider failures never
raise: the caller gets its original topics back and ``last_error`` tells
it why. Only an overlapping call is rejected with an exception.
"""

import asyncio
import dataclasses
import logging
from typing import Callable, List, Optional, Sequence

from ..config import TopicLanguage
from ..models import Topic
from .ai_service import AIConfig, AIProvider, AIService, config_from_env
from .credential_store import CredentialStore
from .errors import (
    BingoError,
    ConversionInProgressError,
    MissingCredentialError,
    StoreUnavailableError,
)
from .normalizer import apply_short_labels
from .topic_store import TopicStore

logger = logging.getLogger(__name__)

ClientFactory = Callable[[AIConfig], AIService]


class ShorteningService:
    """
    Converts topics to short labels through an AI provider.

    Usage:
        service = ShorteningService(SettingsCredentialStore())
        shortened = await service.convert_topics(store.topics, TopicLanguage.GERMAN)
        if service.last_error is None:
            store.replace_topics(shortened)
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        ai_config: Optional[AIConfig] = None,
        client_factory: Optional[ClientFactory] = None
    ):
        """
        Initialize the service and build a client from the saved credential.

        Args:
            credential_store: Where the provider API key is kept
            ai_config: Provider settings (the api_key field is ignored)
            client_factory: Builds the AI client from a config; defaults to AIService
        """
        self.credential_store = credential_store
        self.ai_config = ai_config or config_from_env()
        self._client_factory: ClientFactory = client_factory or AIService
        self._client: Optional[AIService] = None
        self._stale_clients: List[AIService] = []
        self._lock = asyncio.Lock()
        self.last_error: Optional[BingoError] = None
        self.rebuild_client()

    @property
    def is_converting(self) -> bool:
        return self._lock.locked()

    @property
    def has_client(self) -> bool:
        return self._client is not None

    def rebuild_client(self) -> None:
        """Rebuild the AI client from the current credential."""
        if self._client is not None:
            self._stale_clients.append(self._client)
            self._client = None

        try:
            secret = self.credential_store.current_secret()
        except StoreUnavailableError as e:
            logger.warning("Could not read API key: %s", e)
            self.last_error = e
            return

        needs_key = self.ai_config.provider != AIProvider.OLLAMA
        if needs_key and not secret:
            return
        self._client = self._client_factory(dataclasses.replace(self.ai_config, api_key=secret))

    def save_api_key(self, secret: str) -> bool:
        """
        Store a new API key and rebuild the client with it.

        Returns:
            False for a blank key (nothing changes)

        Raises:
            StoreUnavailableError: If the credential store cannot be written
        """
        if not self.credential_store.save(secret):
            return False
        self.rebuild_client()
        return True

    async def convert_topics(
        self,
        topics: Sequence[Topic],
        language: TopicLanguage = TopicLanguage.ENGLISH
    ) -> List[Topic]:
        """
        Shorten a batch of topics.

        Args:
            topics: Topics to convert, in order
            language: Language for the short labels

        Returns:
            Copies with ``short_text`` set, or the input topics unchanged on
            failure (see ``last_error``)

        Raises:
            ConversionInProgressError: If another conversion is running
        """
        originals = list(topics)
        try:
            shortened = await self._convert(originals, language)
        except ConversionInProgressError:
            raise
        except BingoError as e:
            self._record_failure(e)
            return originals
        self.last_error = None
        return shortened

    async def _convert(self, originals: List[Topic], language: TopicLanguage) -> List[Topic]:
        """
        Run one conversion under the single-flight lock.

        Raises:
            ConversionInProgressError: If another conversion is running
            BingoError: Any other conversion failure
        """
        if self._lock.locked():
            # The running conversion owns last_error; report the rejection to this caller only
            logger.warning("Rejected topic conversion: another conversion is running")
            raise ConversionInProgressError()
        client = self._client
        if client is None:
            raise MissingCredentialError()
        if not originals:
            return originals

        async with self._lock:
            labels = await client.shorten([topic.text for topic in originals], language)
            shortened = apply_short_labels(originals, labels)
        logger.info("Shortened %d topics (%s)", len(shortened), language.display_name)
        return shortened

    def _record_failure(self, error: BingoError) -> None:
        logger.error("Topic conversion failed: %s", error.message)
        self.last_error = error

    async def shorten_store(
        self,
        store: TopicStore,
        language: TopicLanguage = TopicLanguage.ENGLISH
    ) -> bool:
        """
        Shorten every topic in ``store`` and merge the result back.

        Returns:
            True if the store was updated
        """
        snapshot = store.topics
        if not snapshot:
            return False
        try:
            shortened = await self._convert(snapshot, language)
        except ConversionInProgressError:
            return False
        except BingoError as e:
            self._record_failure(e)
            return False
        self.last_error = None
        store.replace_topics(shortened)
        return True

    async def close(self) -> None:
        """Close the current and any replaced clients."""
        clients = self._stale_clients + ([self._client] if self._client else [])
        self._stale_clients = []
        for client in clients:
            await client.close()
