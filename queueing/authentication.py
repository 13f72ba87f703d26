"""
Token authentication for API clients.

Kept in its own module so that DRF can import it from settings without
pulling in any view code.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """``Authorization: Bearer <key>`` using DRF's token table."""

    keyword = 'Bearer'
