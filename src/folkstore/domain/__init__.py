"""Domain layer: wire messages, action results, and bootstrap records.

Pure pydantic models with no I/O. Every other layer may import from here.
"""
