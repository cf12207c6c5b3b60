"""
String utility functions for the catalog sync service
"""

import re
import unicodedata
from typing import Optional

# Emoji and pictographic code points, plus the joiners and selectors that glue them together
_EMOJI_PATTERN = re.compile(
    "["
    "\U0001F000-\U0001FAFF"  # mahjong, cards, symbols, pictographs, emoticons, transport, flags
    "\U00002600-\U000027BF"  # misc symbols and dingbats
    "\U00002B00-\U00002BFF"  # misc symbols and arrows (stars, squares)
    "\U0000231A-\U0000231B"
    "\U000023E9-\U000023FA"
    "\U000025AA-\U000025FE"
    "\U00002934-\U00002935"
    "\U00003030\U0000303D\U00003297\U00003299"
    "\U0000200D"  # zero width joiner
    "\U000020E3"  # combining keycap
    "\U0000FE0E-\U0000FE0F"  # variation selectors
    "\U000E0020-\U000E007F"  # tag characters
    "]+"
)

_WHITESPACE_PATTERN = re.compile(r"\s+")


def strip_emoji(text: Optional[str]) -> str:
    """Remove emoji and pictographs, collapse whitespace and trim"""
    if not text:
        return ""
    without_emoji = _EMOJI_PATTERN.sub("", text)
    return _WHITESPACE_PATTERN.sub(" ", without_emoji).strip()


def slugify(text: str, separator: str = "-") -> str:
    """Convert text to URL-friendly slug"""
    if not text:
        return ""

    text = unicodedata.normalize("NFKD", text.lower())
    text = text.encode("ascii", "ignore").decode("ascii")

    # Remove non-alphanumeric characters
    text = re.sub(r"[^\w\s-]", "", text)

    # Replace spaces and underscores with separator
    text = re.sub(r"[-\s_]+", separator, text)

    return text.strip(separator)


def extract_numeric_gid(gid: Optional[str]) -> Optional[str]:
    """Return the trailing id segment of a Shopify gid (gid://shopify/Product/123 -> 123)"""
    if not gid or not isinstance(gid, str):
        return None
    return gid.rstrip("/").split("/")[-1] or None
