"""Network access to the remote game service."""

from pride_sync.client.orders import (
    FULL_UNIVERSE_REPORT,
    OrderType,
    gather_all_ships,
    new_fleet,
    ship_transfer,
)
from pride_sync.client.session import (
    DEFAULT_BASE_URL,
    OrderGateway,
    OrderResult,
    SessionClient,
    encode_form_data,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "FULL_UNIVERSE_REPORT",
    "OrderGateway",
    "OrderResult",
    "OrderType",
    "SessionClient",
    "encode_form_data",
    "gather_all_ships",
    "new_fleet",
    "ship_transfer",
]
