"""Outbound ports - interfaces for external dependencies.

Outbound ports define contracts for external systems that the
engine depends on, such as the file system holding table data.
"""

from tabdb.ports.outbound.table_storage import TableStorage

__all__ = [
    "TableStorage",
]
