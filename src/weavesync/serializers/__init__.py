"""
Serializers for data exchanged between tasks
"""

from .rowstream import (
    FILE_SUFFIX,
    decode_row,
    encode_row,
    read_file,
    read_rows,
    write_file,
    write_rows,
)

__all__ = [
    "FILE_SUFFIX",
    "decode_row",
    "encode_row",
    "read_file",
    "read_rows",
    "write_file",
    "write_rows",
]
