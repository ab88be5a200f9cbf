"""
Core helpers package for the dispatcher.

Transport-independent pieces: settings, the method set, payload
encoding, response decoding and the error contract.  Keeping them out
of the client modules lets the async and sync clients share a single
fallback chain.
"""

__all__ = []
