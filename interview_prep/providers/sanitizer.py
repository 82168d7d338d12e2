import re

from interview_prep.core.constants import SANITIZED_MAX_LENGTH, TRUNCATION_MARKER

_BLOCK_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]*>")


def sanitize(text: str | None, max_length: int = SANITIZED_MAX_LENGTH) -> str:
    """Strip markup from untrusted input and bound its length.

    Script and style blocks go together with their contents, then every other
    tag is dropped. The result is trimmed and, if still longer than
    ``max_length``, cut there with a ``...`` marker appended.
    """
    if not text:
        return ""
    cleaned = _BLOCK_RE.sub("", text)
    cleaned = _TAG_RE.sub("", cleaned).strip()
    if len(cleaned) > max_length:
        return cleaned[:max_length] + TRUNCATION_MARKER
    return cleaned
