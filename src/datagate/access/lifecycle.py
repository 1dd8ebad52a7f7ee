"""
Connection lifecycle: nested open/close over a single driver connection.

Manifesto:
    Composite operations call ``open()``/``close()`` around each driver call.
    Those calls nest, so an inner ``close()`` must not close a connection an
    outer caller still needs.  ``ConnectionHandle`` counts outstanding opens
    and only touches the driver on the 0 -> 1 and 1 -> 0 transitions.

    The counter is a reentrancy count, not a lock: concurrent tasks sharing
    one handle still race on the driver unless it serialises internally.

Architecture:
    ::

        open()                               close()
        ──────                               ───────
        nesting > 0         → nesting += 1   persisting or nesting > 1
        persisting & is_open → nesting += 1      → nesting -= 1 (floor 0)
        else driver.open()  → nesting = 1    else driver.close()
                                                 → nesting = 0 (even on failure)

Guardrails:
    ❌ DON'T: mutate ``nesting`` outside this class
    ✅ DO: use ``datagate.access.scoped`` to pair open/close

Tags:
    connection, lifecycle, reference-count, datagate
"""

from __future__ import annotations

from datagate.core.errors import DatabaseConnectionError
from datagate.core.logging import get_logger
from datagate.core.protocols import Driver

logger = get_logger(__name__)


class ConnectionHandle:
    """Owns exactly one driver connection and its open nesting level."""

    def __init__(self, driver: Driver, *, persisting: bool = True):
        self._driver: Driver | None = driver
        self._persisting = persisting
        self._nesting = 0

    @property
    def driver(self) -> Driver:
        if self._driver is None:
            raise DatabaseConnectionError("Connection handle has been destroyed")
        return self._driver

    @property
    def nesting(self) -> int:
        """Number of ``open()`` calls not yet matched by ``close()``."""
        return self._nesting

    @property
    def persisting(self) -> bool:
        return self._persisting

    @property
    def is_open(self) -> bool:
        return self._driver is not None and self._driver.is_open

    @property
    def destroyed(self) -> bool:
        return self._driver is None

    async def open(self) -> None:
        """Acquire one open reference, opening the driver only when needed.

        Raises:
            DatabaseConnectionError: the driver failed to open; nesting is
                left unchanged.
        """
        if self._nesting > 0:
            self._nesting += 1
            return
        driver = self.driver
        if self._persisting and driver.is_open:
            self._nesting += 1
            return
        try:
            await driver.open()
        except DatabaseConnectionError:
            raise
        except Exception as e:
            raise DatabaseConnectionError(f"Error opening database: {e}", cause=e) from e
        self._nesting = 1
        logger.debug("connection_opened", persisting=self._persisting)

    async def close(self) -> None:
        """Release one open reference; never raises.

        Persisting handles (and nested references) only decrement the
        counter.  Otherwise the driver is closed and the counter reset to 0
        whether or not the driver close succeeded.
        """
        if self._persisting or self._nesting > 1:
            if self._nesting > 0:
                self._nesting -= 1
            return
        if self._driver is None:
            self._nesting = 0
            return
        try:
            await self._driver.close()
            logger.debug("connection_closed")
        except Exception as e:
            logger.warning("connection_close_failed", error=str(e))
        finally:
            self._nesting = 0

    def destroy(self) -> None:
        """Destroy the driver connection; the handle is unusable afterwards."""
        if self._driver is not None:
            self._driver.destroy()
        self._driver = None
        self._nesting = 0

    def __repr__(self) -> str:
        return (
            f"ConnectionHandle(nesting={self._nesting}, persisting={self._persisting}, "
            f"open={self.is_open})"
        )


__all__ = ["ConnectionHandle"]
