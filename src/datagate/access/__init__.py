"""Data-access layer: lifecycle, scoped execution, security and streaming.

Modules
-------
lifecycle     ConnectionHandle: nested open/close counting
scoped        opened / ensure_open / ensure_open_stream
results       first/last table, row and scalar reductions
security      get_filter_secured
packets       PacketAssembler state machine
multiselect   N selects in one command, demultiplexed by alias
rows          post commands and key-based merges
data_access   DataAccess façade
"""

from datagate.access.data_access import DataAccess
from datagate.access.lifecycle import ConnectionHandle
from datagate.access.packets import PacketAssembler
from datagate.access.scoped import ensure_open, ensure_open_stream, opened
from datagate.access.security import get_filter_secured

__all__ = [
    "DataAccess",
    "ConnectionHandle",
    "PacketAssembler",
    "ensure_open",
    "ensure_open_stream",
    "opened",
    "get_filter_secured",
]
