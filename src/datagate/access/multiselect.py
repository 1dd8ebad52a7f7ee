"""
Multi-select: N selects, one round-trip.

Steps::

    selects ──group──► [s1, s2, s3]
                │ concurrently, order preserved
                ▼
      get_filter_secured + get_select_command per select
                │
                ▼
      driver.append_commands([...])  ── one physical command
                │
                ▼
      driver.query_packets ──PacketAssembler(alias_list)──► Packet("A"), Packet("B"), ...

Set ``i`` of the response belongs to the ``i``-th (grouped) select, so the
alias list drives the demultiplexing.  An empty select list produces no
packets and never reaches the driver.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from contextlib import aclosing
from dataclasses import replace
from typing import Any

from datagate.access.lifecycle import ConnectionHandle
from datagate.access.packets import PacketAssembler, alias_list
from datagate.access.scoped import opened
from datagate.access.security import get_filter_secured
from datagate.core.logging import get_logger
from datagate.core.protocols import Driver, Security, SelectGrouper
from datagate.core.types import Packet, SelectSpec

logger = get_logger(__name__)


def keep_order(selects: Sequence[SelectSpec]) -> list[SelectSpec]:
    """Default grouper: every select is issued as given."""
    return list(selects)


async def _secured_command(
    driver: Driver,
    security: Security | None,
    spec: SelectSpec,
    apply_security: bool,
    environment: Any,
) -> Any:
    env = spec.environment if spec.environment is not None else environment
    filter_sec = await get_filter_secured(
        security, spec.filter, apply_security and spec.apply_security, spec.table_name, env
    )
    return driver.get_select_command(replace(spec, filter=filter_sec, environment=env))


async def build_multi_select(
    driver: Driver,
    security: Security | None,
    selects: Sequence[SelectSpec],
    *,
    apply_security: bool = True,
    environment: Any = None,
) -> tuple[Any, list[str]]:
    """Return the concatenated command and the alias of each of its result sets."""
    commands = await asyncio.gather(
        *(_secured_command(driver, security, s, apply_security, environment) for s in selects)
    )
    return driver.append_commands(list(commands)), [s.result_name for s in selects]


async def multi_select(
    handle: ConnectionHandle,
    security: Security | None,
    selects: Sequence[SelectSpec],
    *,
    grouper: SelectGrouper = keep_order,
    packet_size: int = 0,
    raw: bool = False,
    apply_security: bool = True,
    environment: Any = None,
) -> AsyncIterator[Packet]:
    """Run ``selects`` as one command and stream their packets by alias."""
    if not selects:
        return
    grouped = list(grouper(selects))
    async with opened(handle):
        driver = handle.driver
        command, aliases = await build_multi_select(
            driver, security, grouped, apply_security=apply_security, environment=environment
        )
        logger.debug("multi_select_started", tables=aliases, packet_size=packet_size)
        assembler = PacketAssembler(alias_list(aliases), raw=raw)
        packets = assembler.reassemble(driver.query_packets(command, raw, packet_size))
        async with aclosing(packets) as stream:
            async for packet in stream:
                yield packet


__all__ = ["keep_order", "build_multi_select", "multi_select"]
