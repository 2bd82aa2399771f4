"""
Month key validation.
"""

import re

from contentops.kernel.errors import InvalidFormat

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def validate_month(month: str) -> str:
    """
    Check a "YYYY-MM" month key.

    Raises:
        InvalidFormat: Unless month is a four-digit year and a two-digit month 01-12
    """
    if not isinstance(month, str) or not MONTH_PATTERN.match(month):
        raise InvalidFormat("Month must be in YYYY-MM format", {"month": month})
    return month
