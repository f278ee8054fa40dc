"""
Title checks applied before a task write is accepted.
"""
from typing import Optional

from models import ErrorCode, TITLE_MAX_LENGTH


def validate_title(title: str) -> Optional[ErrorCode]:
    """
    Return None for an acceptable title, ErrorCode.INVALID_TITLE otherwise.
    Only emptiness and the length bound are checked; whitespace is not trimmed.
    """
    if title == "":
        return ErrorCode.INVALID_TITLE
    if len(title) > TITLE_MAX_LENGTH:
        return ErrorCode.INVALID_TITLE
    return None

