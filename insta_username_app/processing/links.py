"""
Profile Links

Turns a result set into Instagram profile links and hands them to a sink
(the browser clipboard, stdout or a file).
"""

from typing import Callable

from .errors import ClipboardError
from .logger import get_logger
from .models import ResultSet

logger = get_logger(__name__)

PROFILE_URL_TEMPLATE = "https://www.instagram.com/{username}"


def profile_url(username: str) -> str:
    return PROFILE_URL_TEMPLATE.format(username=username)


def build_links_text(result_set: ResultSet) -> str:
    """One profile URL per line, images in order, usernames in order."""
    return "\n".join(profile_url(username) for username in result_set.all_usernames)


def copy_all_links(result_set: ResultSet, sink: Callable[[str], None]) -> str:
    """
    Write every profile link to `sink`.

    Nothing is written when there are no usernames.

    Returns:
        The text that was written

    Raises:
        ClipboardError: If the sink fails. The result set is left untouched.
    """
    text = build_links_text(result_set)
    if not text:
        return ""

    try:
        sink(text)
    except Exception as e:
        logger.error(f"Failed to copy links: {e}")
        raise ClipboardError(f"Copy failed: {e}") from e

    logger.info(f"Copied {result_set.total_usernames} link(s)")
    return text
