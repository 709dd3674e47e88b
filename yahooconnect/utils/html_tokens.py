"""
Extraction of hidden form values from consent pages.

The consent pages are not schema-stable: the ``name`` and ``value`` attributes
of the hidden inputs appear in either order and with either quote style. Each
order has its own compiled pattern so that one can be adjusted without
touching the other.
"""

import functools
import re
from typing import Optional, Tuple


CSRF_TOKEN_FIELD = "csrfToken"
SESSION_ID_FIELD = "sessionId"

# Quoted attribute value; the token stops at the matching quote and never leaves the tag
_QUOTED_VALUE = r"(?P<vq>[\"'])(?P<token>(?:(?!(?P=vq))[^>])*)(?P=vq)"


def _quoted_name(field_name: str) -> str:
    return r"(?P<nq>[\"'])" + re.escape(field_name) + r"(?P=nq)"


@functools.lru_cache(maxsize=None)
def token_patterns(field_name: str) -> Tuple["re.Pattern[str]", "re.Pattern[str]"]:
    """
    Build the name-first and value-first patterns for a form field.

    Patterns are compiled once per field name and shared read-only afterwards.

    Args:
        field_name: Value of the ``name`` attribute to look for

    Returns:
        Tuple of (name_first, value_first) compiled patterns, each exposing
        the attribute value as the ``token`` group
    """
    name_first = re.compile(
        r"<[^>]*?\sname\s*=\s*"
        + _quoted_name(field_name)
        + r"[^>]*?\svalue\s*=\s*"
        + _QUOTED_VALUE
    )
    value_first = re.compile(
        r"<[^>]*?\svalue\s*=\s*"
        + _QUOTED_VALUE
        + r"[^>]*?\sname\s*=\s*"
        + _quoted_name(field_name)
    )
    return name_first, value_first


# The consent fields are needed on every negotiation
for _field in (CSRF_TOKEN_FIELD, SESSION_ID_FIELD):
    token_patterns(_field)


def match_name_first(html: str, field_name: str) -> Optional[str]:
    """Match ``name="<field>" ... value="<token>"`` within one tag."""
    match = token_patterns(field_name)[0].search(html)
    return match.group("token") if match else None


def match_value_first(html: str, field_name: str) -> Optional[str]:
    """Match ``value="<token>" ... name="<field>"`` within one tag."""
    match = token_patterns(field_name)[1].search(html)
    return match.group("token") if match else None


def extract_token(html: str, field_name: str) -> Optional[str]:
    """
    Locate the ``value`` of the input-like tag whose ``name`` is field_name.

    Args:
        html: HTML document
        field_name: Form field name, e.g. ``csrfToken``

    Returns:
        The attribute value, or None when no tag matches
    """
    token = match_name_first(html, field_name)
    if token is None:
        token = match_value_first(html, field_name)
    return token
