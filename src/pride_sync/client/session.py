"""Authenticated session against the remote game service."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from http.cookies import SimpleCookie
from typing import Any, Protocol, Self
from urllib.parse import quote, urlencode

import aiohttp
from pydantic import BaseModel, ValidationError
from pydantic.config import ConfigDict

from pride_sync.client.orders import FULL_UNIVERSE_REPORT
from pride_sync.shared.errors import (
    AuthenticationError,
    MalformedSnapshotError,
    TransportError,
    UnexpectedResponseError,
)
from pride_sync.universe import INIT_PLAYER_TAGS, PlayerProfile, Universe

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://np.ironhelmet.com"
LOGIN_PATH = "/arequest/login"
INIT_PLAYER_PATH = "/mrequest/init_player"
ORDER_PATH = "/trequest/order"

AUTH_COOKIE = "auth"

FULL_UNIVERSE_EVENT = "order:full_universe"
ORDER_OK_EVENT = "order:ok"

DEFAULT_REQUEST_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "Content-Type": "application/x-www-form-urlencoded; charset=utf-8",
}


def encode_form_data(data: Mapping[str, str]) -> str:
    """Encode *data* the way browsers encode form fields with ``encodeURIComponent``."""
    return urlencode(data, safe="!~*'()", quote_via=quote)


class OrderResult(BaseModel):
    """Outcome of one submitted order.

    ``universe`` holds the replacement snapshot when the service chose to
    resync, and is ``None`` for a bare acknowledgement.
    """

    model_config = ConfigDict(frozen=True)

    event: str
    universe: Universe | None = None

    @property
    def is_acknowledgement(self) -> bool:
        return self.universe is None


class OrderGateway(Protocol):
    """Capability handed to a game so it can talk to the service."""

    async def submit_order(self, game_id: str, order: str) -> OrderResult:
        """Submit *order* for *game_id* and return the parsed outcome."""

    async def fetch_snapshot(self, game_id: str) -> Universe:
        """Return a freshly fetched universe for *game_id*."""


@dataclass(slots=True)
class _Reply:
    status: int
    text: str
    cookies: SimpleCookie


class SessionClient:
    """Own the authentication token and perform the service's network calls.

    The client moves one way from unauthenticated to authenticated. A call
    that needs the token before :meth:`authenticate` succeeded raises
    :class:`AuthenticationError`; nothing here logs in again on its own or
    retries a failed request.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        session: aiohttp.ClientSession | None = None,
        token: str | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None
        self._token = token

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def token(self) -> str | None:
        """Session token captured from the login cookie."""
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    async def close(self) -> None:
        """Close the underlying HTTP session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def authenticate(self, username: str, password: str) -> str:
        """Log in as *username* and remember the returned session token."""
        logger.info("Authenticating as %s", username)
        reply = await self._post(
            LOGIN_PATH,
            {"type": "login", "alias": username, "password": password},
            authenticated=False,
        )
        morsel = reply.cookies.get(AUTH_COOKIE)
        if morsel is None or not morsel.value:
            msg = f"No {AUTH_COOKIE} cookie received when logging in as {username}."
            raise AuthenticationError(msg)
        self._token = morsel.value
        return morsel.value

    async def init_player(self) -> PlayerProfile:
        """Return the account profile listing the games it participates in."""
        reply = await self._post(INIT_PLAYER_PATH, {"type": "init_player"})
        payload = self._decode_json(reply)
        if (
            not isinstance(payload, list)
            or len(payload) < 2
            or payload[0] not in INIT_PLAYER_TAGS
        ):
            msg = "Unexpected init_player response."
            raise UnexpectedResponseError(msg, payload)
        try:
            return PlayerProfile.model_validate(payload[1])
        except ValidationError as exc:
            msg = f"Malformed init_player profile: {exc}"
            raise UnexpectedResponseError(msg, payload) from exc

    async def submit_order(self, game_id: str, order: str) -> OrderResult:
        """Send one *order* for *game_id* and parse the service's answer."""
        logger.info("Sending order %r to game %s", order, game_id)
        reply = await self._post(
            ORDER_PATH,
            {"type": "order", "order": order, "version": "", "game_number": game_id},
        )
        payload = self._decode_json(reply)
        if not isinstance(payload, dict):
            msg = f"Unexpected order response for game {game_id}: {payload!r}"
            raise UnexpectedResponseError(msg, payload)

        event = payload.get("event")
        if event == FULL_UNIVERSE_EVENT:
            if "report" not in payload:
                msg = f"Order response for game {game_id} carries no report."
                raise MalformedSnapshotError(msg)
            universe = Universe.parse(game_id, payload["report"])
            return OrderResult(event=event, universe=universe)
        if event == ORDER_OK_EVENT:
            return OrderResult(event=event)

        msg = f"Unexpected order response: {event} ({json.dumps(payload)[:200]})"
        raise UnexpectedResponseError(msg, payload)

    async def fetch_snapshot(self, game_id: str) -> Universe:
        """Request a full universe report for *game_id*."""
        result = await self.submit_order(game_id, FULL_UNIVERSE_REPORT)
        if result.universe is None:
            msg = f"Full universe report for game {game_id} was only acknowledged."
            raise UnexpectedResponseError(msg, result.event)
        return result.universe

    def _require_token(self) -> str:
        if self._token is None:
            msg = "Auth token required, call authenticate first."
            raise AuthenticationError(msg)
        return self._token

    def _http(self) -> aiohttp.ClientSession:
        if self._session is None:
            # The token is sent explicitly, so the session keeps no cookies.
            self._session = aiohttp.ClientSession(cookie_jar=aiohttp.DummyCookieJar())
            self._owns_session = True
        return self._session

    async def _post(
        self,
        path: str,
        form: Mapping[str, str],
        *,
        authenticated: bool = True,
    ) -> _Reply:
        headers = dict(DEFAULT_REQUEST_HEADERS)
        if authenticated:
            headers["Cookie"] = f"{AUTH_COOKIE}={self._require_token()}"
        url = f"{self._base_url}{path}"
        try:
            async with self._http().post(
                url, data=encode_form_data(form), headers=headers
            ) as response:
                text = await response.text()
                reply = _Reply(
                    status=response.status, text=text, cookies=response.cookies
                )
        except (aiohttp.ClientError, TimeoutError) as exc:
            msg = f"Request to {url} failed: {exc}"
            raise TransportError(msg) from exc

        if reply.status >= 400:
            msg = f"Request to {url} failed with HTTP {reply.status}."
            raise TransportError(msg)
        return reply

    @staticmethod
    def _decode_json(reply: _Reply) -> Any:
        try:
            return json.loads(reply.text)
        except ValueError as exc:
            msg = "Service answered with a non-JSON body."
            raise UnexpectedResponseError(msg, reply.text) from exc


__all__ = [
    "AUTH_COOKIE",
    "DEFAULT_BASE_URL",
    "DEFAULT_REQUEST_HEADERS",
    "FULL_UNIVERSE_EVENT",
    "INIT_PLAYER_PATH",
    "LOGIN_PATH",
    "ORDER_OK_EVENT",
    "ORDER_PATH",
    "OrderGateway",
    "OrderResult",
    "SessionClient",
    "encode_form_data",
]
