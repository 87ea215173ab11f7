"""
Custom authentication backend for token-based auth.

Kept separate from any view definitions so that Django REST framework
can import it during initialisation without circular imports.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """Token authentication using the ``Token`` keyword.

    Exists to provide a stable import path for the project's
    configuration and to allow later customisation.
    """

    keyword = 'Token'
