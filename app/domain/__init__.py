"""Pure domain types: tunnel settings shapes and bearer tokens.

These modules are free of FastAPI and storage concerns so they can be
unit-tested on their own.
"""
__all__ = ["tunnel", "tokens"]
