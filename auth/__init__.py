"""
Auth package: token codec (standard library only), configuration, token helpers and route guards.
"""
from . import jwt, config, tokens

__all__ = ["jwt", "config", "tokens"]
