# -*- coding: utf-8 -*-
"""Utility modules."""

from allocation_migrator.utils.validation import (
    is_hex_address,
    is_private_key,
    mask_address,
)

__all__ = ["is_hex_address", "is_private_key", "mask_address"]
