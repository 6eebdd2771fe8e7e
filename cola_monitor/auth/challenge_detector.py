"""Detect anti-automation challenge pages served instead of registry content."""
import re
import logging

logger = logging.getLogger(__name__)

# Strong indicators: any one is enough
_STRONG_INDICATORS = [
    r"<title[^>]*>\s*request rejected\s*</title>",
    r"the requested url was rejected",
    r"support id is:?\s*\d+",
    r"<title[^>]*>\s*just a moment\.*\s*</title>",
    r"g-recaptcha|h-captcha|cf-challenge",
]

# Weak indicators (need multiple)
_WEAK_INDICATORS = [
    "captcha",
    "verify you are human",
    "enable javascript",
    "access denied",
    "unusual traffic",
]


def is_challenge_page(response_html: str | None) -> bool:
    """
    Detect if a response is a bot challenge or rejection page.

    Returns True if a strong indicator matches, or at least two weak ones do.
    """
    if not response_html:
        return False

    html_lower = response_html.lower()

    for pattern in _STRONG_INDICATORS:
        if re.search(pattern, html_lower):
            logger.debug(f"Challenge page indicator matched: {pattern}")
            return True

    count = sum(1 for indicator in _WEAK_INDICATORS if indicator in html_lower)
    return count >= 2
