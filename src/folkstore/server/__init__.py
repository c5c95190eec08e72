"""Backend side of the bridge: the connection multiplexer."""

from folkstore.server.multiplexer import Backend

__all__ = ["Backend"]
