# -*- coding: utf-8 -*-
"""
Entry points for the allocation migration.

- run(): proposal pipeline. Rows from the Dune query are encoded as
  transferAllocation calls, batched into one Safe transaction per chunk and
  proposed to the Safe Transaction Service, one nonce after another.
- run_cleanup(): deletes pending proposals of the Safe sent by the signer.

Both validate configuration before building any component, stop between
chunks on SIGINT and close the HTTP session on exit.

Run with: allocation-migrate / allocation-cleanup
(or python -m allocation_migrator.main)
"""
from __future__ import annotations

import asyncio
import signal
import sys
from collections.abc import Awaitable, Callable
from typing import Any
import structlog

from allocation_migrator.DI import Container
from allocation_migrator.config import Settings, get_settings
from allocation_migrator.exceptions import MigrationError
from allocation_migrator.logging.config import configure_logging
from allocation_migrator.services.cleanup import CleanupReport
from allocation_migrator.services.pipeline import PipelineReport
from allocation_migrator.utils import mask_address


def _setup_sigint(shutdown_event: asyncio.Event) -> None:
    try:
        loop = asyncio.get_running_loop()
        loop.add_signal_handler(
            signal.SIGINT,
            lambda: shutdown_event.set(),
        )
    except NotImplementedError:
        pass  # Windows has no add_signal_handler


async def run(settings: Settings | None = None) -> PipelineReport:
    """Run the proposal pipeline.

    Raises:
        MissingRequiredConfigError: Before anything else, if required env values are absent.
        ConfigurationError: If RPC__URL serves a chain other than SAFE__CHAIN_ID.
        PipelineAbortedError: If a chunk fails; earlier chunks stay proposed.
    """
    settings = settings or get_settings()
    configure_logging(settings)
    logger = structlog.get_logger("main")
    try:
        settings.validate_for_pipeline()
    except MigrationError as e:
        logger.error("main_invalid_config", error_type=type(e).__name__, error_message=str(e))
        raise

    container = Container(config=settings)
    http_client = container.http_client()
    try:
        rpc = container.rpc_client()
        await container.retry_policy().run(
            "verify_chain_id",
            lambda: rpc.verify_chain_id(settings.safe.chain_id),
        )
        driver = container.pipeline_driver()
        identity = container.signer_identity()
        shutdown_event = asyncio.Event()
        _setup_sigint(shutdown_event)

        logger.info(
            "main_pipeline_started",
            safe_masked=mask_address(settings.safe.address),
            chain_id=settings.safe.chain_id,
            signer_role=identity.role.value,
            chunk_size=settings.migration.chunk_size,
            advance_mode=settings.migration.advance_mode,
        )
        report = await driver.run_or_raise(shutdown_event)
        logger.info(
            "main_pipeline_complete",
            chunks_proposed=report.proposed_count,
            stopped=report.stopped,
            safe_tx_hashes=[c.safe_tx_hash for c in report.proposed],
        )
        return report
    finally:
        await http_client.aclose()
        logger.info("main_shutdown_complete")


async def run_cleanup(settings: Settings | None = None) -> CleanupReport:
    """Delete pending proposals (only the signer's own unless CLEANUP__ONLY_OWN=false)."""
    settings = settings or get_settings()
    configure_logging(settings)
    logger = structlog.get_logger("main")
    try:
        settings.validate_for_cleanup()
    except MigrationError as e:
        logger.error("main_invalid_config", error_type=type(e).__name__, error_message=str(e))
        raise

    container = Container(config=settings)
    http_client = container.http_client()
    try:
        service = container.cleanup_service()
        logger.info(
            "main_cleanup_started",
            safe_masked=mask_address(settings.safe.address),
            chain_id=settings.safe.chain_id,
            only_own=settings.cleanup.only_own,
        )
        report = await service.delete_pending(only_own=settings.cleanup.only_own)
        logger.info(
            "main_cleanup_complete",
            deleted_count=len(report.deleted),
            skipped_count=len(report.skipped),
        )
        return report
    finally:
        await http_client.aclose()
        logger.info("main_shutdown_complete")


def _exit_on_error(coro_fn: Callable[[], Awaitable[Any]]) -> None:
    try:
        asyncio.run(coro_fn())
    except MigrationError as e:
        structlog.get_logger("main").error(
            "main_failed",
            error_type=type(e).__name__,
            error_message=str(e),
        )
        sys.exit(1)


def main() -> None:
    _exit_on_error(run)


def cleanup() -> None:
    _exit_on_error(run_cleanup)


__all__ = ["run", "run_cleanup", "main", "cleanup"]

if __name__ == "__main__":
    main()
