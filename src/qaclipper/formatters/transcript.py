"""Q&A transcript formatters."""

from ..models.items import Conversation, ConversationTurn, ImageItem, items_to_markdown
from .base import BaseFormatter

LABELS: dict[str, tuple[str, str]] = {
    "qa": ("Question", "Answer"),
    "prompt": ("Prompt", "Response"),
    "short": ("Q", "A"),
    "korean": ("질문", "답변"),
    "chinese": ("问题", "回答"),
    "japanese": ("質問", "回答"),
    "vietnamese": ("Câu hỏi", "Trả lời"),
    "indonesian": ("Pertanyaan", "Jawaban"),
    "hindi": ("प्रश्न", "उत्तर"),
    "spanish": ("Pregunta", "Respuesta"),
    "portuguese": ("Pergunta", "Resposta"),
    "french": ("Question", "Réponse"),
    "german": ("Frage", "Antwort"),
    "italian": ("Domanda", "Risposta"),
    "russian": ("Вопрос", "Ответ"),
    "arabic": ("سؤال", "جواب"),
    "swahili": ("Swali", "Jibu"),
}

NUMBER_FORMATS: dict[str, str] = {
    "noSpace": "{}",
    "space": " {}",
    "dashNoSpace": "-{}",
    "dash": "- {}",
    "spaceDashNoSpace": " -{}",
    "spaceDash": " - {}",
    "colonNoSpace": ":{}",
    "colon": ": {}",
    "spaceColonNoSpace": " :{}",
    "spaceColon": " : {}",
}


def get_label(label_style: str, role: str) -> str:
    """Return the question or answer label for a label style ("qa" if unknown)."""
    question, answer = LABELS.get(label_style, LABELS["qa"])
    return question if role == "user" else answer


def format_number(number_format: str, index: int) -> str:
    """
    Format a pair number.

    Examples:
        >>> format_number("dash", 3)
        '- 3'
        >>> format_number("colonNoSpace", 1)
        ':1'
    """
    return NUMBER_FORMATS.get(number_format, NUMBER_FORMATS["space"]).format(index)


class TranscriptFormatter(BaseFormatter):
    """Markdown Q&A transcript.

    Each user turn opens a numbered question heading and each assistant
    turn gets the matching answer heading:

        ## Question 1

        How do I reverse a list?

        ## Answer 1

        Use `reversed()` or slicing.
    """

    def format_image(self, url: str) -> str:
        label = self.settings.image_label
        if self.settings.image_format == "markdown":
            return f"[{label}]({url})"
        if self.settings.image_format == "plain":
            return url
        return f"[{label}]: {url}"

    def heading(self, label: str, number: str) -> str:
        return f"{'#' * self.settings.header_level} {label}{number}"

    def turn_body(self, turn: ConversationTurn) -> tuple[str, list[str]]:
        """Split a turn into its text and the image URLs listed after it."""
        images = list(turn.images)
        if turn.items:
            images.extend(item.src for item in turn.items if isinstance(item, ImageItem))
            body = items_to_markdown([item for item in turn.items if not isinstance(item, ImageItem)])
        else:
            body = turn.content
        return body.strip(), images

    def format_conversation(self, conversation: Conversation) -> str:
        blocks: list[str] = []
        pair_index = 0
        question_open = False

        for turn in conversation.turns:
            if turn.role == "user":
                # Consecutive user turns share one pair number
                if not question_open:
                    pair_index += 1
                question_open = True
            elif turn.role == "assistant":
                question_open = False
            else:
                self.logger.debug(f"Skipping turn {turn.index} with role {turn.role!r}")
                continue

            label = get_label(self.settings.label_style, turn.role)
            blocks.append(self.heading(label, format_number(self.settings.number_format, pair_index)))

            body, images = self.turn_body(turn)
            if body:
                blocks.append(body)
            if images:
                blocks.append("\n".join(self.format_image(url) for url in images))

        return "\n\n".join(blocks).strip()

    def get_file_extension(self) -> str:
        return ".md"


class PlainTranscriptFormatter(TranscriptFormatter):
    """Plain text transcript: bare label lines and raw image URLs."""

    def heading(self, label: str, number: str) -> str:
        return f"{label}{number}"

    def format_image(self, url: str) -> str:
        return url

    def get_file_extension(self) -> str:
        return ".txt"
