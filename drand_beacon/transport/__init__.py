"""
Transports deliver raw drand documents by URL.

Anything with a ``fetch(url) -> str`` method is a transport; it raises
``NotFound`` for missing documents and another ``TransportError`` for
everything else. Verification never trusts what a transport returns.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .http import HttpTransport


@runtime_checkable
class Transport(Protocol):
    def fetch(self, url: str) -> str: ...


__all__ = ["Transport", "HttpTransport"]
