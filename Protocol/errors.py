"""
Protocol/errors.py
Exceptions raised by the BB84 communicators.
"""


class ValidationError(ValueError):
    """A channel or key failed the structural checks of a protocol step."""
