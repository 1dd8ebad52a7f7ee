"""
Security filter composition.

Every read resolves its filter through ``get_filter_secured`` so that the
table's security condition cannot be skipped by omission: ``apply_security``
defaults to True everywhere.

Rules, in order:

1. A filter with ``is_false`` is returned unchanged and the provider is not
   called (nothing can match anyway).
2. With ``apply_security`` and a configured ``Security``, the caller filter
   is ANDed with the table's select condition for ``environment``.
3. Otherwise the caller filter is returned unchanged.
"""

from __future__ import annotations

from typing import Any

from datagate.core.enums import AccessMode
from datagate.core.errors import SecurityError
from datagate.core.filters import Filter, and_
from datagate.core.logging import get_logger
from datagate.core.protocols import Security

logger = get_logger(__name__)


async def get_filter_secured(
    security: Security | None,
    filter: Filter | None,
    apply_security: bool,
    table_name: str,
    environment: Any = None,
) -> Filter | None:
    """Return ``filter`` merged with the read security condition of ``table_name``.

    Raises:
        SecurityError: the security condition lookup failed.
    """
    if filter is not None and filter.is_false:
        return filter
    if not apply_security or security is None:
        return filter
    try:
        condition = await security.security_condition(table_name, AccessMode.SELECT, environment)
    except SecurityError:
        raise
    except Exception as e:
        raise SecurityError(
            f"Error getting security condition for {table_name}: {e}", cause=e
        ).with_context(table_name=table_name) from e
    logger.debug("security_condition_applied", table_name=table_name, has_condition=condition is not None)
    return and_(filter, condition)


__all__ = ["get_filter_secured"]
