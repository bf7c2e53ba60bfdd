import asyncio
import logging
import uuid
from urllib.parse import parse_qs, urlparse

import httpx
import respx

from marketplace_auth.oauth.state import OAuthState
from marketplace_auth.settings import settings

TEST_CLIENT_ID = "test-client-id"
TEST_REDIRECT_URI = "http://localhost:7071/api/callback"
TEST_WEBHOST = "http://localhost:8888"
TEST_ADMIN_API_KEY = "test-admin-key"

DEFAULT_LANDING = f"{TEST_WEBHOST}/winning"
APP_LANDING = f"{TEST_WEBHOST}/app"


def _token_response(token="gho_e2e_token"):
    return httpx.Response(
        200,
        text=f"access_token={token}&scope=&token_type=bearer",
        headers={"content-type": "application/x-www-form-urlencoded"},
    )


def _state_from_location(location):
    return parse_qs(urlparse(location).query)["state"][0]


def _set_cookie_headers(response):
    return response.headers.get_list("set-cookie")


def _has_token_cookie(response):
    return any(h.startswith("token=") for h in _set_cookie_headers(response))


def _callback(client, state_cookie, query):
    if state_cookie is not None:
        client.cookies.set("state", state_cookie)
    return client.get("/callback", params=query, follow_redirects=False)


def test_setup_sets_state_cookie_and_redirects_to_provider(client):
    response = client.get("/setup", follow_redirects=False)

    assert response.status_code == 302
    state_cookie = response.cookies.get("state")
    assert len(state_cookie) == 36
    assert str(uuid.UUID(state_cookie)) == state_cookie

    location = response.headers["location"]
    assert location.startswith(settings.github_authorize_url + "?")
    query = parse_qs(urlparse(location).query)
    assert query["client_id"] == [TEST_CLIENT_ID]
    assert query["redirect_uri"] == [TEST_REDIRECT_URI]
    assert query["state"] == [state_cookie]


def test_setup_accepts_post(client):
    response = client.post("/setup", follow_redirects=False)

    assert response.status_code == 302
    assert "state" in response.cookies


def test_setup_from_app_marks_state(client):
    response = client.get("/setup", params={"from": "app"}, follow_redirects=False)

    state = _state_from_location(response.headers["location"])
    assert state.split(",")[1] == "fromapp"
    # The cookie jar sends the value back exactly as the provider will
    assert client.cookies.get("state").strip('"').replace("\\054", ",") == state


def test_setup_states_differ_between_calls(client):
    first = _state_from_location(client.get("/setup", follow_redirects=False).headers["location"])
    second = _state_from_location(client.get("/setup", follow_redirects=False).headers["location"])

    assert first != second


def test_setup_without_client_id_is_unavailable(client, monkeypatch):
    monkeypatch.setattr(settings, "client_id", "")

    response = client.get("/setup", follow_redirects=False)

    assert response.status_code == 503


def test_setup_does_not_need_client_secret(client, monkeypatch):
    monkeypatch.setattr(settings, "client_secret", None)

    response = client.get("/setup", follow_redirects=False)

    assert response.status_code == 302
    assert parse_qs(urlparse(response.headers["location"]).query)["client_id"] == [TEST_CLIENT_ID]


@respx.mock
def test_end_to_end_login_records_purchase(client, marketplace_store, make_purchase):
    token_route = respx.post(settings.github_token_url).mock(return_value=_token_response("gho_e2e_token"))
    respx.get(settings.github_marketplace_purchases_url).mock(
        return_value=httpx.Response(200, json=[make_purchase(account_id=1001, login="octocat", plan_id=7)])
    )

    setup_response = client.get("/setup", follow_redirects=False)
    state = _state_from_location(setup_response.headers["location"])

    response = client.get("/callback", params={"state": state, "code": "auth-code"}, follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == DEFAULT_LANDING
    assert response.cookies.get("token") == "gho_e2e_token"
    assert token_route.called

    records = asyncio.run(marketplace_store.list_records())
    assert len(records) == 1
    assert (records[0].account_id, records[0].account_login, records[0].plan_id) == (1001, "octocat", 7)


@respx.mock
def test_callback_from_app_lands_on_app_path(client, make_purchase):
    respx.post(settings.github_token_url).mock(return_value=_token_response())
    respx.get(settings.github_marketplace_purchases_url).mock(
        return_value=httpx.Response(200, json=[make_purchase()])
    )
    state = OAuthState(origin_marker="fromapp").encode()

    response = _callback(client, state, {"state": state, "code": "auth-code"})

    assert response.headers["location"] == APP_LANDING
    assert _has_token_cookie(response)



@respx.mock
def test_setup_from_app_cookie_round_trip_lands_on_app_path(client, make_purchase):
    respx.post(settings.github_token_url).mock(return_value=_token_response())
    respx.get(settings.github_marketplace_purchases_url).mock(
        return_value=httpx.Response(200, json=[make_purchase()])
    )

    setup_response = client.get("/setup", params={"from": "app"}, follow_redirects=False)
    state = _state_from_location(setup_response.headers["location"])
    # The state cookie comes back from the jar in its quoted form
    response = client.get("/callback", params={"state": state, "code": "auth-code"}, follow_redirects=False)

    assert response.headers["location"] == APP_LANDING
    assert _has_token_cookie(response)


@respx.mock
def test_callback_ignores_fields_after_origin_marker(client, make_purchase):
    respx.post(settings.github_token_url).mock(return_value=_token_response())
    respx.get(settings.github_marketplace_purchases_url).mock(
        return_value=httpx.Response(200, json=[make_purchase()])
    )
    state = OAuthState(origin_marker="fromapp").encode() + ",x"

    response = _callback(client, state, {"state": state, "code": "auth-code"})

    assert response.headers["location"] == APP_LANDING
    assert _has_token_cookie(response)


def test_callback_token_exchange_error_redirects_without_token(client, caplog):
    body = "error=bad_verification_code&error_description=expired"
    state = OAuthState(origin_marker="fromapp").encode()

    with respx.mock(assert_all_called=False) as router:
        token_route = router.post(settings.github_token_url).mock(
            return_value=httpx.Response(
                200, text=body, headers={"content-type": "application/x-www-form-urlencoded"}
            )
        )
        marketplace_route = router.get(settings.github_marketplace_purchases_url)

        response = _callback(client, state, {"state": state, "code": "stale-code"})

    assert token_route.called
    assert response.status_code == 302
    assert response.headers["location"] == DEFAULT_LANDING
    assert not _has_token_cookie(response)
    assert not marketplace_route.called
    assert any(r.levelno >= logging.ERROR and body in r.getMessage() for r in caplog.records)
    assert any("token_exchange_failed" in r.getMessage() for r in caplog.records)
    assert not any("Error processing auth" in r.getMessage() for r in caplog.records)


def test_callback_without_state_cookie_fails_closed(client, caplog):
    response = _callback(client, None, {"state": "abc", "code": "auth-code"})

    assert response.headers["location"] == DEFAULT_LANDING
    assert not _has_token_cookie(response)
    assert any("state cookie is missing" in r.getMessage() for r in caplog.records)


def test_callback_state_mismatch_fails(client, caplog):
    response = _callback(client, "cookie-state", {"state": "query-state", "code": "auth-code"})

    assert response.headers["location"] == DEFAULT_LANDING
    assert not _has_token_cookie(response)
    assert any(
        "cookie-state" in r.getMessage() and "query-state" in r.getMessage() for r in caplog.records
    )


def test_callback_without_code_fails(client):
    state = OAuthState().encode()

    response = _callback(client, state, {"state": state})

    assert response.headers["location"] == DEFAULT_LANDING
    assert not _has_token_cookie(response)


@respx.mock
def test_callback_network_failure_is_caught(client, caplog):
    respx.post(settings.github_token_url).mock(side_effect=httpx.ConnectError("connection refused"))
    state = OAuthState().encode()

    response = _callback(client, state, {"state": state, "code": "auth-code"})

    assert response.status_code == 302
    assert response.headers["location"] == DEFAULT_LANDING
    assert not _has_token_cookie(response)
    assert any(r.exc_info for r in caplog.records if r.levelno >= logging.ERROR)


@respx.mock
def test_callback_unreadable_purchases_fails(client):
    respx.post(settings.github_token_url).mock(return_value=_token_response())
    respx.get(settings.github_marketplace_purchases_url).mock(
        return_value=httpx.Response(200, json=[{"account": {"login": "no-id"}, "plan": {}}])
    )
    state = OAuthState().encode()

    response = _callback(client, state, {"state": state, "code": "auth-code"})

    assert response.headers["location"] == DEFAULT_LANDING
    assert not _has_token_cookie(response)


def test_is_authenticated_without_token(client):
    response = client.get("/isauthenticated", headers={"Origin": TEST_WEBHOST})

    assert response.status_code == 200
    assert response.json() == {"result": False}
    assert response.headers["access-control-allow-origin"] == TEST_WEBHOST
    assert response.headers["access-control-allow-credentials"] == "true"



def test_is_authenticated_preflight_is_answered(client):
    response = client.options(
        "/isauthenticated",
        headers={"Origin": TEST_WEBHOST, "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == TEST_WEBHOST
    assert response.headers["access-control-allow-credentials"] == "true"


def test_is_authenticated_other_origin_gets_no_cors_headers(client):
    response = client.get("/isauthenticated", headers={"Origin": "http://evil.example"})

    assert response.json() == {"result": False}
    assert "access-control-allow-origin" not in response.headers


def test_is_authenticated_with_any_token(client):
    client.cookies.set("token", "not-even-a-real-token")

    response = client.get("/isauthenticated")

    assert response.json() == {"result": True}


def test_signout_expires_token_cookie(client):
    client.cookies.set("token", "gho_abc")

    response = client.get("/signout", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == APP_LANDING
    token_headers = [h for h in _set_cookie_headers(response) if h.startswith("token=")]
    assert len(token_headers) == 1
    assert token_headers[0].startswith("token=rubbish")
    assert "01 Jan 1970" in token_headers[0]


def test_admin_marketplace_requires_api_key(client):
    assert client.get("/admin/marketplace/").status_code == 401
    assert client.get("/admin/marketplace/", headers={"X-Admin-API-Key": "wrong"}).status_code == 403



def test_admin_marketplace_unavailable_without_server_key(client, monkeypatch):
    monkeypatch.setattr(settings, "admin_api_key", None)

    response = client.get("/admin/marketplace/", headers={"X-Admin-API-Key": TEST_ADMIN_API_KEY})

    assert response.status_code == 503


@respx.mock
def test_admin_marketplace_lists_synced_records(client, make_purchase):
    respx.post(settings.github_token_url).mock(return_value=_token_response())
    respx.get(settings.github_marketplace_purchases_url).mock(
        return_value=httpx.Response(200, json=[make_purchase(account_id=42, login="mona", plan_id=3)])
    )
    state = OAuthState().encode()
    _callback(client, state, {"state": state, "code": "auth-code"})
    headers = {"X-Admin-API-Key": TEST_ADMIN_API_KEY}

    listed = client.get("/admin/marketplace/", headers=headers)
    single = client.get("/admin/marketplace/42", headers=headers)
    missing = client.get("/admin/marketplace/43", headers=headers)

    assert [(r["account_id"], r["account_login"], r["plan_id"]) for r in listed.json()] == [(42, "mona", 3)]
    assert single.json()[0]["account_type"] == "User"
    assert missing.status_code == 404


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
