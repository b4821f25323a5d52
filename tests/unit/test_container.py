# -*- coding: utf-8 -*-
"""Wiring tests for the DI container and the entry points."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest

from allocation_migrator import main as main_module
from allocation_migrator.DI import Container
from allocation_migrator.config import Settings
from allocation_migrator.exceptions import ConfigurationError, MissingRequiredConfigError
from allocation_migrator.models.proposal import SignerRole
from allocation_migrator.services.cleanup import ProposalCleanupService
from allocation_migrator.services.pipeline import PipelineDriver, SignerPreflight


def test_container_builds_pipeline_without_network(settings_factory: Callable[..., Settings]) -> None:
    container = Container(config=settings_factory())

    driver = container.pipeline_driver()

    assert isinstance(driver, PipelineDriver)
    assert isinstance(container.signer_preflight(), SignerPreflight)
    assert container.signer_identity().role is SignerRole.DELEGATE
    assert container.safe_address().lower() == container.config().safe.address.lower()
    # Singletons share the same HTTP client
    assert container.dune_client()._http is container.safe_service_client()._http


def test_preflight_can_be_disabled(settings_factory: Callable[..., Settings]) -> None:
    container = Container(config=settings_factory(migration={"preflight_signer_check": False}))

    assert container.signer_preflight() is None


def test_owner_role_from_settings(settings_factory: Callable[..., Settings]) -> None:
    container = Container(config=settings_factory(signer={"role": "owner"}))

    assert container.signer_identity().role is SignerRole.OWNER


def test_container_builds_cleanup(settings_factory: Callable[..., Settings]) -> None:
    container = Container(config=settings_factory(rpc={"url": None}, dune={"api_key": None}))

    assert isinstance(container.cleanup_service(), ProposalCleanupService)


async def test_run_validates_config_before_building(
    settings_factory: Callable[..., Settings],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    built: list[object] = []
    monkeypatch.setattr(main_module, "Container", lambda **kw: built.append(kw))

    with pytest.raises(MissingRequiredConfigError):
        await main_module.run(settings_factory(dune={"api_key": None}))

    assert built == []


async def test_run_closes_http_client(
    settings_factory: Callable[..., Settings],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    settings = settings_factory()
    container = Container(config=settings)
    driver = container.pipeline_driver()
    driver.run_or_raise = AsyncMock(side_effect=RuntimeError("boom"))  # type: ignore[method-assign]
    container.rpc_client().verify_chain_id = AsyncMock(return_value=100)  # type: ignore[method-assign]
    http = container.http_client()
    http.aclose = AsyncMock()  # type: ignore[method-assign]
    monkeypatch.setattr(main_module, "Container", lambda **kw: container)

    with pytest.raises(RuntimeError):
        await main_module.run(settings)

    http.aclose.assert_awaited_once()


async def test_run_stops_when_rpc_serves_another_chain(
    settings_factory: Callable[..., Settings],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    settings = settings_factory()
    container = Container(config=settings)
    container.rpc_client().chain_id = AsyncMock(return_value=1)  # type: ignore[method-assign]
    driver = container.pipeline_driver()
    driver.run_or_raise = AsyncMock()  # type: ignore[method-assign]
    container.http_client().aclose = AsyncMock()  # type: ignore[method-assign]
    monkeypatch.setattr(main_module, "Container", lambda **kw: container)

    with pytest.raises(ConfigurationError, match="SAFE__CHAIN_ID"):
        await main_module.run(settings)

    driver.run_or_raise.assert_not_awaited()


def test_main_exits_non_zero_on_migration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    async def failing() -> None:
        raise MissingRequiredConfigError("SAFE__ADDRESS")

    monkeypatch.setattr(main_module, "run", failing)

    with pytest.raises(SystemExit) as exc:
        main_module.main()

    assert exc.value.code == 1
