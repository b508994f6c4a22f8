"""
Purpose: Guardrails for inputs and attachments.
Content: early, predictable failures; prevent oversized requests and
attachments that are not what the tutor prompt expects.
"""

from ..errors import InvalidAttachmentType
from ..utils.data_uri import parse_data_uri

MAX_INPUT_CHARS = 8000
ACCEPTED_MEDIA_TYPE = "application/pdf"


class DefaultSecurity:
    def __init__(
        self,
        *,
        max_input_chars: int = MAX_INPUT_CHARS,
        accepted_media_type: str = ACCEPTED_MEDIA_TYPE,
    ) -> None:
        self.max_input_chars = max_input_chars
        self.accepted_media_type = accepted_media_type

    def validate_user_input(self, text: str) -> None:
        if not (text or "").strip():
            raise ValueError("Please enter a non-empty message.")
        if len(text) > self.max_input_chars:
            raise ValueError("Re-type your question.\nYour message is too long.")

    def sanitize_for_prompt(self, text: str) -> str:
        return (text or "").replace("\x00", "")

    def check_media_type(self, media_type: str) -> None:
        if (media_type or "").lower() != self.accepted_media_type:
            raise InvalidAttachmentType(media_type, self.accepted_media_type)

    def validate_attachment(self, data_uri: str, media_type: str) -> None:
        """
        The declared type must be the accepted one, and the data URI must
        carry the same type with a decodable payload.
        """
        self.check_media_type(media_type)
        try:
            uri_type, payload = parse_data_uri(data_uri)
        except ValueError:
            raise InvalidAttachmentType(media_type, self.accepted_media_type)
        if uri_type != self.accepted_media_type or not payload:
            raise InvalidAttachmentType(uri_type, self.accepted_media_type)
