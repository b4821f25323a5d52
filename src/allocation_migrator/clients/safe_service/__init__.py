"""Safe Transaction Service (coordination service) client."""

from allocation_migrator.clients.safe_service.chains import (
    TRANSACTION_SERVICE_URLS,
    transaction_service_url,
)
from allocation_migrator.clients.safe_service.safe_service_client import SafeServiceClient
from allocation_migrator.clients.safe_service.schema import (
    DelegateSchema,
    MultisigTransactionSchema,
    ProposeTransactionBody,
    SafeInfoSchema,
)

__all__ = [
    "DelegateSchema",
    "MultisigTransactionSchema",
    "ProposeTransactionBody",
    "SafeInfoSchema",
    "SafeServiceClient",
    "TRANSACTION_SERVICE_URLS",
    "transaction_service_url",
]
