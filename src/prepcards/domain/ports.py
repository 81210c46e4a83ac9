"""
Ports (interfaces) for progress storage.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from .models import MasteryRecord, StudySession


class ProgressRepository(ABC):
    """
    Port for reading and writing flashcard mastery records.

    Implementations:
        - JsonProgressRepository: A single JSON progress document on disk.
    """

    @abstractmethod
    def load(self) -> dict[str, MasteryRecord]:
        """
        Load the full card id -> mastery record mapping.

        Returns:
            Mapping of every tracked card. Cards never rated are absent.
        """
        pass

    @abstractmethod
    def save_record(self, record: MasteryRecord) -> None:
        """
        Store a record, replacing any previous record for the same card.

        Args:
            record: The record returned by the scheduler.
        """
        pass

    @abstractmethod
    def load_sessions(self) -> list[StudySession]:
        """Load the study log, oldest session first."""
        pass

    @abstractmethod
    def save_sessions(self, sessions: list[StudySession]) -> None:
        """Replace the study log."""
        pass

    @abstractmethod
    def load_interview_date(self) -> datetime | None:
        """The date the user is preparing for, if one is set."""
        pass
