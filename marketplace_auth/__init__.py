# marketplace_auth/__init__.py
"""GitHub login with marketplace plan recording."""

__version__ = "0.1.0"
