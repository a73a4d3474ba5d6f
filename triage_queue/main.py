"""Main entry point for the triage queue.

This module wires the domain to its adapters: it builds the persistence
adapter and the QueueService from configuration, and exposes ``main`` for
the ``triage-queue`` console script.

Architecture:
    - Follows Hexagonal Architecture principles
    - The store is created here, owned by one QueueService for the session,
      and dropped when the process exits
"""

import logging
from pathlib import Path
from typing import Optional, Union

from triage_queue.adapters.flat_file_codec import FlatFileCodec
from triage_queue.domain.ports import PersistencePort
from triage_queue.domain.services import QueueService
from triage_queue.domain.store import PatientStore
from triage_queue.infrastructure.settings import settings

logger = logging.getLogger(__name__)


def create_persistence_adapter() -> PersistencePort:
    """Create the persistence adapter for the queue data file."""
    return FlatFileCodec()


def create_queue_service(
    data_file: Optional[Union[str, Path]] = None,
    initial_capacity: Optional[int] = None
) -> QueueService:
    """Create a QueueService with a fresh, empty store.

    Parameters:
        data_file: Overrides the configured data file
        initial_capacity: Overrides the configured starting capacity

    Returns:
        QueueService: Service owning a new PatientStore

    Raises:
        pydantic.ValidationError: If the configuration is invalid
    """
    store = PatientStore(initial_capacity=initial_capacity or settings.initial_capacity)
    target = Path(data_file) if data_file else settings.data_file
    logger.debug(f"Queue service created with data file {target} and capacity {store.capacity}")
    return QueueService(store=store, persistence=create_persistence_adapter(), data_file=target)


def main() -> None:
    """Run the command line interface."""
    from triage_queue.cli import app
    app()


if __name__ == "__main__":
    main()
