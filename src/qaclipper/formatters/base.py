"""Base formatter interface."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from ..models.config import FormatSettings
from ..models.items import Conversation


class BaseFormatter(ABC):
    """Base class for transcript formatters.

    Formatters turn an extracted Conversation into a single document
    (Markdown Q&A transcript, plain text, ...).
    """

    def __init__(self, settings: Optional[FormatSettings] = None):
        """Initialize formatter.

        Args:
            settings: Labels, numbering and image settings
        """
        self.settings = settings or FormatSettings()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @abstractmethod
    def format_conversation(self, conversation: Conversation) -> str:
        """Format a conversation.

        Args:
            conversation: Extracted conversation

        Returns:
            Formatted document (trimmed)
        """
        pass

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get file extension for this format.

        Returns:
            File extension including dot (e.g., '.md', '.txt')
        """
        pass

    def save_formatted(self, conversation: Conversation, file_path: Path) -> Path:
        """Format and save a conversation to file.

        Args:
            conversation: Conversation to format and save
            file_path: Destination file path

        Returns:
            Path to saved file
        """
        formatted = self.format_conversation(conversation)

        # Ensure output directory exists
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, "w", encoding="utf-8") as f:
            f.write(formatted + "\n")

        self.logger.debug(f"Saved formatted conversation to {file_path}")

        return file_path
