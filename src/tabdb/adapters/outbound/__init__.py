"""Outbound adapters - implementations of outbound ports."""

from tabdb.adapters.outbound.tab_file_storage import (
    TabFileStorage,
    decode_table,
    encode_row,
    encode_table,
)

__all__ = [
    "TabFileStorage",
    "decode_table",
    "encode_row",
    "encode_table",
]
