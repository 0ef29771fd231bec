"""Adapters layer - concrete implementations of port interfaces.

Adapters provide the actual implementations:
- Inbound adapters: Handle incoming requests (command parser, TCP, REST)
- Outbound adapters: Implement external dependencies (table files)
"""

from tabdb.adapters.outbound import TabFileStorage

__all__ = [
    # Outbound adapters
    "TabFileStorage",
]
