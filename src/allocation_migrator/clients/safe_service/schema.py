"""Safe Transaction Service request/response types. Keys match the API (camelCase)."""

from __future__ import annotations

from typing import Any, TypedDict


class SafeInfoSchema(TypedDict, total=False):
    """GET /api/v1/safes/{address}/"""

    address: str
    nonce: int | str
    threshold: int
    owners: list[str]
    masterCopy: str
    version: str


class MultisigTransactionSchema(TypedDict, total=False):
    """Item of GET /api/v1/safes/{address}/multisig-transactions/ (subset of fields used here)."""

    safe: str
    to: str
    value: str
    data: str | None
    operation: int
    nonce: int | str
    safeTxHash: str
    proposer: str | None
    isExecuted: bool
    confirmations: list[dict[str, Any]]


class PaginatedSchema(TypedDict, total=False):
    count: int
    next: str | None
    previous: str | None
    results: list[dict[str, Any]]


class DelegateSchema(TypedDict, total=False):
    """Item of GET /api/v2/delegates/"""

    safe: str | None
    delegate: str
    delegator: str
    label: str
    expiryDate: str | None


class ProposeTransactionBody(TypedDict, total=False):
    """POST /api/v1/safes/{address}/multisig-transactions/ body."""

    to: str
    value: str
    data: str | None
    operation: int
    safeTxGas: str
    baseGas: str
    gasPrice: str
    gasToken: str
    refundReceiver: str
    nonce: int
    contractTransactionHash: str
    sender: str
    signature: str
    origin: str | None
