"""Domain layer for record-xml.

This module contains the Record model, its payload channels, the port
contracts and the services built on them. Domain models depend on nothing
beyond Pydantic.
"""

from .record import (
    ChannelFactory,
    FileChannelFactory,
    InMemoryChannelFactory,
    Record,
)

__all__ = [
    "ChannelFactory",
    "FileChannelFactory",
    "InMemoryChannelFactory",
    "Record",
]
