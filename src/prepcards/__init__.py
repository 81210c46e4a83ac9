"""prepcards: SM-2 flashcard scheduling for interview preparation."""

__version__ = "0.1.0"
