"""folkstore: one shared SQLite backend for many in-process clients."""

__version__ = "0.1.0"
