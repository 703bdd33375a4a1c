"""Tests for the session client against a local stand-in of the service."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from pride_sync.client.session import (
    INIT_PLAYER_PATH,
    LOGIN_PATH,
    ORDER_PATH,
    SessionClient,
    encode_form_data,
)
from pride_sync.shared.errors import (
    AuthenticationError,
    MalformedSnapshotError,
    TransportError,
    UnexpectedResponseError,
)

TOKEN = "token-abc123"


class FakeService:
    """Minimal imitation of the login, init_player and order endpoints."""

    def __init__(self, raw_universe: dict[str, Any]) -> None:
        self.raw_universe = raw_universe
        self.requests: list[tuple[str, dict[str, str], str | None]] = []
        self.login_sets_cookie = True
        self.order_reply: Callable[[dict[str, str]], web.Response] | None = None
        self.init_reply: Any = [
            "meta_init_player",
            {
                "games_in": 1,
                "user_id": "42",
                "alias": "Admiral",
                "open_games": [{"number": "777", "name": "Test Galaxy"}],
            },
        ]

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post(LOGIN_PATH, self._login)
        app.router.add_post(INIT_PLAYER_PATH, self._init_player)
        app.router.add_post(ORDER_PATH, self._order)
        return app

    async def _record(self, request: web.Request) -> dict[str, str]:
        form = {key: str(value) for key, value in (await request.post()).items()}
        self.requests.append((request.path, form, request.cookies.get("auth")))
        return form

    async def _login(self, request: web.Request) -> web.Response:
        form = await self._record(request)
        response = web.json_response(["meta:login_success", form["alias"]])
        if self.login_sets_cookie:
            response.set_cookie("auth", TOKEN)
        return response

    async def _init_player(self, request: web.Request) -> web.Response:
        await self._record(request)
        return web.json_response(self.init_reply)

    async def _order(self, request: web.Request) -> web.Response:
        form = await self._record(request)
        if request.cookies.get("auth") != TOKEN:
            return web.json_response({"event": "order:error", "report": "must_be_logged_in"})
        if self.order_reply is not None:
            return self.order_reply(form)
        if form["order"] == "full_universe_report":
            return web.json_response(
                {"event": "order:full_universe", "report": self.raw_universe}
            )
        return web.json_response({"event": "order:ok"})


def run_against(
    service: FakeService,
    scenario: Callable[[SessionClient], Awaitable[Any]],
    *,
    token: str | None = None,
) -> Any:
    """Start *service*, run *scenario* with a client pointed at it, tear down."""

    async def main() -> Any:
        server = TestServer(service.app())
        await server.start_server()
        try:
            async with SessionClient(
                base_url=f"http://{server.host}:{server.port}", token=token
            ) as client:
                return await scenario(client)
        finally:
            await server.close()

    return asyncio.run(main())


@pytest.fixture
def service(raw_universe) -> FakeService:
    return FakeService(raw_universe(tick=8))


def test_encode_form_data_matches_uri_component_encoding() -> None:
    encoded = encode_form_data({"order": "new_fleet,1,2", "alias": "Jo Doe (x)!"})

    assert encoded == "order=new_fleet%2C1%2C2&alias=Jo%20Doe%20(x)!"


def test_authenticate_stores_token_from_cookie(service: FakeService) -> None:
    async def scenario(client: SessionClient) -> tuple[str, str | None]:
        token = await client.authenticate("admiral", "hunter2")
        return token, client.token

    token, stored = run_against(service, scenario)

    assert token == TOKEN
    assert stored == TOKEN
    path, form, _ = service.requests[0]
    assert path == LOGIN_PATH
    assert form == {"type": "login", "alias": "admiral", "password": "hunter2"}


def test_authenticate_without_cookie_fails(service: FakeService) -> None:
    service.login_sets_cookie = False

    async def scenario(client: SessionClient) -> None:
        with pytest.raises(AuthenticationError):
            await client.authenticate("admiral", "wrong")
        assert not client.is_authenticated

    run_against(service, scenario)


def test_calls_before_authentication_are_refused(service: FakeService) -> None:
    async def scenario(client: SessionClient) -> None:
        with pytest.raises(AuthenticationError):
            await client.submit_order("777", "full_universe_report")
        with pytest.raises(AuthenticationError):
            await client.init_player()

    run_against(service, scenario)
    assert service.requests == []


def test_init_player_returns_profile(service: FakeService) -> None:
    async def scenario(client: SessionClient) -> Any:
        await client.authenticate("admiral", "hunter2")
        return await client.init_player()

    profile = run_against(service, scenario)

    assert profile.alias == "Admiral"
    assert profile.game_ids() == ["777"]
    path, form, cookie = service.requests[-1]
    assert path == INIT_PLAYER_PATH
    assert form == {"type": "init_player"}
    assert cookie == TOKEN


def test_init_player_with_wrong_tag_is_unexpected(service: FakeService) -> None:
    service.init_reply = ["meta:login_required", {}]

    async def scenario(client: SessionClient) -> None:
        with pytest.raises(UnexpectedResponseError) as excinfo:
            await client.init_player()
        assert excinfo.value.response == ["meta:login_required", {}]

    run_against(service, scenario, token=TOKEN)


def test_init_player_accepts_colon_tag(service: FakeService) -> None:
    service.init_reply = [
        "meta:init_player",
        {"games_in": 1, "open_games": [{"number": "888", "name": "Live"}]},
    ]

    async def scenario(client: SessionClient) -> Any:
        return await client.init_player()

    profile = run_against(service, scenario, token=TOKEN)

    assert profile.game_ids() == ["888"]


def test_fetch_snapshot_parses_full_universe(service: FakeService) -> None:
    async def scenario(client: SessionClient) -> Any:
        return await client.fetch_snapshot("777")

    universe = run_against(service, scenario, token=TOKEN)

    assert universe.game_id == "777"
    assert universe.tick == 8
    assert universe.is_real
    _, form, cookie = service.requests[-1]
    assert form == {
        "type": "order",
        "order": "full_universe_report",
        "version": "",
        "game_number": "777",
    }
    assert cookie == TOKEN


def test_submit_order_acknowledgement_has_no_universe(service: FakeService) -> None:
    async def scenario(client: SessionClient) -> Any:
        return await client.submit_order("777", "gather_all_ships,10")

    result = run_against(service, scenario, token=TOKEN)

    assert result.is_acknowledgement
    assert result.universe is None
    assert result.event == "order:ok"


def test_unexpected_order_event_carries_raw_response(service: FakeService) -> None:
    service.order_reply = lambda form: web.json_response(
        {"event": "order:denied", "report": "nope"}
    )

    async def scenario(client: SessionClient) -> None:
        with pytest.raises(UnexpectedResponseError) as excinfo:
            await client.submit_order("777", "new_fleet,10,1")
        assert excinfo.value.response == {"event": "order:denied", "report": "nope"}

    run_against(service, scenario, token=TOKEN)


def test_full_universe_without_report_is_malformed(service: FakeService) -> None:
    service.order_reply = lambda form: web.json_response(
        {"event": "order:full_universe"}
    )

    async def scenario(client: SessionClient) -> None:
        with pytest.raises(MalformedSnapshotError):
            await client.fetch_snapshot("777")

    run_against(service, scenario, token=TOKEN)


def test_non_json_body_is_unexpected(service: FakeService) -> None:
    service.order_reply = lambda form: web.Response(text="<html>maintenance</html>")

    async def scenario(client: SessionClient) -> None:
        with pytest.raises(UnexpectedResponseError) as excinfo:
            await client.fetch_snapshot("777")
        assert "maintenance" in excinfo.value.response

    run_against(service, scenario, token=TOKEN)


def test_http_error_status_is_transport_error(service: FakeService) -> None:
    service.order_reply = lambda form: web.Response(status=502, text="bad gateway")

    async def scenario(client: SessionClient) -> None:
        with pytest.raises(TransportError, match="502"):
            await client.submit_order("777", "gather_all_ships,10")

    run_against(service, scenario, token=TOKEN)


def test_unreachable_service_is_transport_error() -> None:
    async def main() -> None:
        async with SessionClient(base_url="http://127.0.0.1:1", token=TOKEN) as client:
            with pytest.raises(TransportError):
                await client.submit_order("777", "full_universe_report")

    asyncio.run(main())
