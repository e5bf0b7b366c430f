"""
Rate limiting for the TechWiki API.

One Limiter instance, keyed on client address, is shared by every route.
TECHWIKI_RATE_LIMIT_ENABLED=false turns it off (tests, local batch jobs).
"""

import os

from slowapi import Limiter
from slowapi.util import get_remote_address


def rate_limit_enabled() -> bool:
    return os.environ.get("TECHWIKI_RATE_LIMIT_ENABLED", "true").lower() != "false"


limiter = Limiter(key_func=get_remote_address, enabled=rate_limit_enabled())
