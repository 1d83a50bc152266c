"""Timezone-aware clock used for incident timestamps."""

from datetime import datetime

import pytz

from ..config import get_settings


def now() -> datetime:
    """Return the current time in the configured timezone."""
    return datetime.now(pytz.timezone(get_settings().timezone))
