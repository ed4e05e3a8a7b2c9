"""
Output truncation.
"""

from typing import Optional

from detail_composite.core.constants import DEFAULT_TRUNCATE_WITH


def truncate(text: str, max_length: Optional[int], indicator: str = DEFAULT_TRUNCATE_WITH) -> str:
    """
    Fit text into max_length characters, ending with the indicator when cut.

    Examples:
        >>> truncate("abcdefgh", 5, "...")
        'ab...'
        >>> truncate("abcdef", 2, "...")
        '..'
    """
    if not max_length or max_length <= 0:
        return text
    if len(text) <= max_length:
        return text

    if max_length <= len(indicator):
        return indicator[:max_length]
    return text[: max_length - len(indicator)] + indicator
