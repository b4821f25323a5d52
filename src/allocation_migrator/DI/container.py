# -*- coding: utf-8 -*-
"""Dependency injection container (dependency-injector)."""

from __future__ import annotations

from dependency_injector import containers, providers
from eth_utils import to_checksum_address

from allocation_migrator.clients.dune import DuneClient
from allocation_migrator.clients.http import AsyncHttpClient
from allocation_migrator.clients.rpc_client import RpcClient
from allocation_migrator.clients.safe_service import SafeServiceClient
from allocation_migrator.config import Settings, get_settings
from allocation_migrator.services.batching import AdvanceMode, Batcher
from allocation_migrator.services.cleanup import ProposalCleanupService
from allocation_migrator.services.encoding import RowEncoder
from allocation_migrator.services.nonce import NonceSequencer
from allocation_migrator.services.pipeline import PipelineDriver, SignerPreflight
from allocation_migrator.services.proposal import ProposalSubmitter, TransactionBuilder
from allocation_migrator.utils.retry import RetryPolicy
from allocation_migrator.wallet import SafeWalletRuntime, SignerIdentity


def _safe_address(settings: Settings) -> str:
    return to_checksum_address(settings.safe.address or "")


def _build_identity(settings: Settings) -> SignerIdentity:
    return SignerIdentity.from_private_key(settings.signer.private_key or "", settings.signer.role)


def _build_row_encoder(settings: Settings) -> RowEncoder:
    return RowEncoder(field=settings.migration.row_field)


def _build_batcher(
    settings: Settings,
    source: DuneClient,
    encoder: RowEncoder,
    retry_policy: RetryPolicy,
) -> Batcher:
    m = settings.migration
    return Batcher(
        source,
        encoder,
        recipient=m.recipient_address or "",
        contract=m.contract_address,
        advance_mode=AdvanceMode(m.advance_mode),
        retry_policy=retry_policy,
    )


def _build_preflight(
    settings: Settings,
    safe_service: SafeServiceClient,
    retry_policy: RetryPolicy,
) -> SignerPreflight | None:
    if not settings.migration.preflight_signer_check:
        return None
    return SignerPreflight(safe_service, _safe_address(settings), retry_policy=retry_policy)


class Container(containers.DeclarativeContainer):
    """Application container. Wires settings, HTTP clients, wallet runtime and pipeline services.

    Entry points pass the validated Settings in: Container(config=settings).
    """

    config = providers.Dependency(instance_of=Settings, default=providers.Callable(get_settings))

    http_client = providers.Singleton(
        AsyncHttpClient,
        settings=config,
    )

    dune_client = providers.Singleton(
        DuneClient,
        http_client=http_client,
        settings=config,
    )

    rpc_client = providers.Singleton(
        RpcClient,
        http_client=http_client,
        settings=config,
    )

    safe_service_client = providers.Singleton(
        SafeServiceClient,
        http_client=http_client,
        settings=config,
    )

    safe_address = providers.Callable(_safe_address, config)

    retry_policy = providers.Singleton(RetryPolicy.from_settings, config)

    signer_identity = providers.Singleton(_build_identity, config)

    wallet_runtime = providers.Singleton(
        SafeWalletRuntime,
        settings=config,
        rpc_client=rpc_client,
        retry_policy=retry_policy,
    )

    row_encoder = providers.Singleton(_build_row_encoder, config)

    batcher = providers.Singleton(
        _build_batcher,
        config,
        dune_client,
        row_encoder,
        retry_policy,
    )

    nonce_sequencer = providers.Singleton(
        NonceSequencer,
        nonce_source=safe_service_client,
        safe_address=safe_address,
        retry_policy=retry_policy,
    )

    transaction_builder = providers.Singleton(
        TransactionBuilder,
        wallet_runtime=wallet_runtime,
    )

    proposal_submitter = providers.Singleton(
        ProposalSubmitter,
        service=safe_service_client,
        safe_address=safe_address,
        origin=config.provided.safe.origin,
    )

    signer_preflight = providers.Singleton(
        _build_preflight,
        config,
        safe_service_client,
        retry_policy,
    )

    pipeline_driver = providers.Singleton(
        PipelineDriver,
        batcher=batcher,
        sequencer=nonce_sequencer,
        builder=transaction_builder,
        submitter=proposal_submitter,
        identity=signer_identity,
        chunk_size=config.provided.migration.chunk_size,
        start_offset=config.provided.migration.start_offset,
        retry_policy=retry_policy,
        max_chunks=config.provided.migration.max_chunks,
        preflight=signer_preflight,
    )

    cleanup_service = providers.Singleton(
        ProposalCleanupService,
        safe_service=safe_service_client,
        identity=signer_identity,
        safe_address=safe_address,
        chain_id=config.provided.safe.chain_id,
        retry_policy=retry_policy,
        pause_seconds=config.provided.cleanup.pause_seconds,
    )
