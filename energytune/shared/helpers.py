"""
Helper utility functions shared by the pattern engine and its consumers.
"""

import re


def format_label(text: str) -> str:
    """Capitalize every word of a label ("alone_time" → "Alone Time")."""
    if not text:
        return ""
    words = text.replace("_", " ").split()
    return " ".join(w[:1].upper() + w[1:] for w in words)


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace and strip the ends."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def truncate_text(text: str, max_len: int = 40) -> str:
    """Truncate text with ellipsis."""
    if len(text) <= max_len:
        return text
    return text[:max_len - 3] + "..."
