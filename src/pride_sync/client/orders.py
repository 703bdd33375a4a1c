"""Order string grammar understood by the ``/trequest/order`` endpoint.

Orders are comma separated with no escaping, so every argument is an
integer id or count.
"""

from __future__ import annotations

from enum import StrEnum


class OrderType(StrEnum):
    """Order verbs submitted as the first comma separated token."""

    FULL_UNIVERSE_REPORT = "full_universe_report"
    NEW_FLEET = "new_fleet"
    SHIP_TRANSFER = "ship_transfer"
    GATHER_ALL_SHIPS = "gather_all_ships"


FULL_UNIVERSE_REPORT = OrderType.FULL_UNIVERSE_REPORT.value


def _format(order_type: OrderType, *arguments: int) -> str:
    for argument in arguments:
        if isinstance(argument, bool) or not isinstance(argument, int):
            msg = f"Order arguments must be integers, got {argument!r}."
            raise TypeError(msg)
    return ",".join([order_type.value, *(str(argument) for argument in arguments)])


def new_fleet(star_id: int, ships: int = 1) -> str:
    """Build a fleet at *star_id* carrying *ships* from the garrison."""
    if ships < 0:
        msg = "A new fleet cannot carry a negative number of ships."
        raise ValueError(msg)
    return _format(OrderType.NEW_FLEET, star_id, ships)


def ship_transfer(fleet_id: int, total_ships: int) -> str:
    """Move ships between a fleet and its star until the fleet holds *total_ships*."""
    if total_ships < 0:
        msg = "Fleet target ship count must be non-negative."
        raise ValueError(msg)
    return _format(OrderType.SHIP_TRANSFER, fleet_id, total_ships)


def gather_all_ships(star_id: int) -> str:
    """Collect every ship at *star_id* into a single fleet."""
    return _format(OrderType.GATHER_ALL_SHIPS, star_id)


__all__ = [
    "FULL_UNIVERSE_REPORT",
    "OrderType",
    "gather_all_ships",
    "new_fleet",
    "ship_transfer",
]
