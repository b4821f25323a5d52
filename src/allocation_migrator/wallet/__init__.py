"""Safe wallet runtime and signer identities."""

from allocation_migrator.wallet.multisend import encode_multisend
from allocation_migrator.wallet.runtime import (
    IWalletRuntime,
    SafeWalletRuntime,
    hash_typed_data,
    safe_tx_typed_data,
)
from allocation_migrator.wallet.signer import SignerIdentity

__all__ = [
    "IWalletRuntime",
    "SafeWalletRuntime",
    "SignerIdentity",
    "encode_multisend",
    "hash_typed_data",
    "safe_tx_typed_data",
]
