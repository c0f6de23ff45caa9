"""User-Agent strings sent with source requests."""

import random
from typing import List


# The Card Hobby gateway answers browser-like Firefox requests reliably
FIREFOX_USER_AGENTS: List[str] = [
    # Firefox on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:139.0) Gecko/20100101 Firefox/139.0",
    # Firefox on macOS
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:139.0) Gecko/20100101 Firefox/139.0",
]


def get_firefox_user_agent() -> str:
    """Get a random Firefox user-agent string."""
    return random.choice(FIREFOX_USER_AGENTS)
