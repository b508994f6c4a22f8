"""
Error taxonomy for the tutor chat.

Every error is caught where it occurs and turned into a toast, a warning, or
a silent no-op. None of them should reach Streamlit's global error handler.
"""


class TutorChatError(Exception):
    """Base class for recoverable tutor-chat errors."""


class InvalidAttachmentType(TutorChatError):
    """The attached file is not of the accepted media type."""

    def __init__(self, media_type: str, accepted: str):
        self.media_type = media_type
        self.accepted = accepted
        super().__init__(
            f"Unsupported file type {media_type or 'unknown'!r}; "
            f"please upload a {accepted} file."
        )


class RemoteCallFailure(TutorChatError):
    """The remote tutoring call errored or returned no usable answer."""


class PersistenceFailure(TutorChatError):
    """Durable storage could not be read or written."""


class StaleSessionReference(TutorChatError):
    """An async completion targets a session that no longer exists."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id!r} no longer exists.")
