"""
Packet reassembly.

Drivers stream a flat sequence of notifications for a (possibly
multi-statement) command::

    MetaMarker(0) RowChunk(0) RowChunk(0) MetaMarker(1) RowChunk(1) ...

``PacketAssembler`` rebuilds set boundaries from the markers and re-emits
each chunk as a ``Packet`` labelled with the table name (or alias) of its
set.  It never splits or merges chunks: packet sizes are whatever the driver
produced for the requested ``packet_size``.

State machine::

    ┌───────────────┐  MetaMarker(s)   ┌──────────────────────────────┐
    │ AwaitingMeta  │ ───────────────► │ InSet(s, table_name, meta)   │
    └───────────────┘                  └──────────────────────────────┘
                                          │ MetaMarker(s') ▲
                                          └────────────────┘
    RowChunk in either state → Packet (empty chunks are dropped)

In raw mode every packet carries the meta of its set; otherwise rows are
expected to be objectified already and ``meta`` is None.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import aclosing
from dataclasses import dataclass

from datagate.core.errors import DriverError
from datagate.core.types import ColumnDescriptor, MetaMarker, Packet, RowChunk


@dataclass(frozen=True)
class AwaitingMeta:
    pass


@dataclass(frozen=True)
class InSet:
    set_index: int
    table_name: str
    meta: tuple[ColumnDescriptor, ...]


AssemblerState = AwaitingMeta | InSet


def single_table(table_name: str) -> Callable[[int], str]:
    """Resolver mapping every set to ``table_name``."""
    return lambda set_index: table_name


def alias_list(aliases: Sequence[str]) -> Callable[[int], str]:
    """Resolver mapping set ``i`` to ``aliases[i]``."""

    def resolve(set_index: int) -> str:
        if 0 <= set_index < len(aliases):
            return aliases[set_index]
        raise DriverError(
            f"Driver reported result set {set_index} but only {len(aliases)} were requested"
        )

    return resolve


class PacketAssembler:
    """Turns driver notifications into labelled packets."""

    def __init__(self, resolve_table_name: Callable[[int], str], *, raw: bool = False):
        self._resolve = resolve_table_name
        self._raw = raw
        self.state: AssemblerState = AwaitingMeta()

    def feed(self, notification: MetaMarker | RowChunk) -> Packet | None:
        """Advance the state machine; return the packet to emit, if any."""
        match notification:
            case MetaMarker(set_index=set_index, meta=meta):
                self.state = InSet(set_index, self._resolve(set_index), tuple(meta))
                return None
            case RowChunk(set_index=set_index, rows=rows):
                if not rows:
                    return None
                return self._packet(set_index, rows)
            case _:
                raise DriverError(f"Unexpected notification in packet stream: {notification!r}")

    def _packet(self, set_index: int, rows: list) -> Packet:
        state = self.state
        if isinstance(state, InSet) and state.set_index == set_index:
            table_name, meta = state.table_name, state.meta
        else:
            table_name, meta = self._resolve(set_index), None
        return Packet(
            table_name=table_name,
            rows=rows,
            set_index=set_index,
            meta=meta if self._raw else None,
        )

    async def reassemble(
        self, notifications: AsyncIterator[MetaMarker | RowChunk]
    ) -> AsyncIterator[Packet]:
        """Re-emit ``notifications`` as packets, in arrival order.

        Closing this generator closes ``notifications`` with it.
        """
        async with aclosing(notifications) as stream:
            async for notification in stream:
                packet = self.feed(notification)
                if packet is not None:
                    yield packet


__all__ = [
    "AwaitingMeta",
    "InSet",
    "PacketAssembler",
    "single_table",
    "alias_list",
]
