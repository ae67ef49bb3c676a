import re
from datetime import datetime
from typing import Optional


def sanitize_title(title: str) -> str:
    """
    Sanitize post title by removing extra whitespace
    """
    return re.sub(r'\s+', ' ', title.strip())


def sanitize_content(content: str) -> str:
    """
    Sanitize post content by collapsing runs of blank lines
    """
    return re.sub(r'\n\s*\n', '\n\n', content.strip())


def format_post_date(value: datetime) -> str:
    """Format a post date the way feeds display it, e.g. "9 Aug 2021"."""
    return f"{value.day} {value.strftime('%b')} {value.year}"


def text_matches(needle: str, *haystack: Optional[str]) -> bool:
    """Case-insensitive substring match against any of the given values"""
    needle = needle.lower()
    return any(needle in value.lower() for value in haystack if value)
