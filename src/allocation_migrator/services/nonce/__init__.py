"""Nonce sequencing."""

from allocation_migrator.services.nonce.nonce_sequencer import INonceSource, NonceSequencer

__all__ = ["INonceSource", "NonceSequencer"]
