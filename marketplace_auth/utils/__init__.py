# marketplace_auth/utils/__init__.py

"""
Utility module initialization file.

Cookie and redirect helpers shared by the HTTP endpoints.
"""

from .http import read_cookie, set_cookie, expire_cookie, redirect_to

__all__ = ["read_cookie", "set_cookie", "expire_cookie", "redirect_to"]
