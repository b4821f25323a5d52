"""Row encoding."""

from allocation_migrator.services.encoding.row_encoder import (
    TRANSFER_ALLOCATION_SELECTOR,
    TRANSFER_ALLOCATION_SIGNATURE,
    RowEncoder,
    encode_row,
    encode_transfer_allocation,
)

__all__ = [
    "RowEncoder",
    "TRANSFER_ALLOCATION_SELECTOR",
    "TRANSFER_ALLOCATION_SIGNATURE",
    "encode_row",
    "encode_transfer_allocation",
]
