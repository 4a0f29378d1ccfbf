"""
Top-level 'stdlib' facade for tuproxy contracts.

Contracts and tests use:

    from stdlib import storage, events, abi, hash, ecdsa

Every call resolves the host that is currently executing contract code
(`execution.runtime.host.active()`), and the frame on top of its call stack.
Storage and events are therefore always bound to the *executing identity*:
under delegation that is the proxy, not the implementation.
"""

from . import abi, ecdsa, events, hash, storage

__all__ = ["storage", "events", "abi", "hash", "ecdsa"]
