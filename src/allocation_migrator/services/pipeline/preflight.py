"""Signer preflight: refuse to start when the signer cannot propose to the Safe."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, List, Protocol

import structlog

from allocation_migrator.clients.safe_service.schema import DelegateSchema, SafeInfoSchema
from allocation_migrator.exceptions import UnauthorizedSignerError
from allocation_migrator.models.proposal import SignerRole
from allocation_migrator.services.proposal.submitter import UNAUTHORIZED_HINTS
from allocation_migrator.utils.retry import RetryPolicy
from allocation_migrator.utils.validation import mask_address
from allocation_migrator.wallet.signer import SignerIdentity


class ISignerDirectory(Protocol):
    async def get_safe_info(self, safe_address: str) -> SafeInfoSchema:
        ...

    async def get_delegates(self, safe_address: str) -> List[DelegateSchema]:
        ...


def _delegate_active(entry: DelegateSchema, now: datetime) -> bool:
    expiry = entry.get("expiryDate")
    if not expiry:
        return True
    expires_at = datetime.fromisoformat(expiry)
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at > now


class SignerPreflight:
    """Checks that an OWNER identity is in the Safe's owner list, or that a
    DELEGATE identity is a registered, unexpired delegate of the Safe."""

    def __init__(
        self,
        directory: ISignerDirectory,
        safe_address: str,
        *,
        retry_policy: RetryPolicy | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        self._directory = directory
        self._safe_address = safe_address
        self._retry = retry_policy or RetryPolicy(max_attempts=1)
        self._clock = clock
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def check(self, identity: SignerIdentity) -> None:
        """Raises UnauthorizedSignerError when identity may not propose."""
        signer = identity.address.lower()
        if identity.role is SignerRole.OWNER:
            info = await self._retry.run(
                "get_safe_info",
                lambda: self._directory.get_safe_info(self._safe_address),
            )
            authorized = signer in {o.lower() for o in info.get("owners", [])}
        else:
            delegates = await self._retry.run(
                "get_delegates",
                lambda: self._directory.get_delegates(self._safe_address),
            )
            now = self._clock()
            authorized = any(
                str(d.get("delegate", "")).lower() == signer and _delegate_active(d, now)
                for d in delegates
            )

        if not authorized:
            hint = UNAUTHORIZED_HINTS[identity.role].format(sender=identity.address)
            self._logger.error(
                "preflight_signer_unauthorized",
                safe_masked=mask_address(self._safe_address),
                signer_role=identity.role.value,
                signer=identity.address,
            )
            raise UnauthorizedSignerError(hint)

        self._logger.info(
            "preflight_signer_ok",
            safe_masked=mask_address(self._safe_address),
            signer_role=identity.role.value,
            signer=identity.address,
        )
