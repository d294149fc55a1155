try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

from urllib.parse import parse_qs, urlsplit

import pytest

from cimd_server.clients.metadata import (
    ClientMetadataError,
    MetadataFailure,
    validate_client_metadata,
)
from cimd_server.core.config import LoginSettings
from cimd_server.services import (
    AuthorizationCodeStore,
    AuthorizeFlowController,
    AuthorizeRedirect,
    CredentialChallenge,
    OAuthError,
)
from cimd_server.services.authorize import append_query_params
from cimd_server.services.client_id import ClientIdFailure
from cimd_server.services.redirects import RedirectFailure

CLIENT_ID = "https://ex.test/md.json"
REDIRECT_URI = "https://ex.test/cb"


class FakeFetcher:
    """Serve canned documents and count how often the network would be hit."""

    def __init__(self, payload=None, error: ClientMetadataError = None) -> None:
        self.payload = payload
        self.error = error
        self.calls: list[str] = []

    async def fetch_and_validate(self, url: str):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return validate_client_metadata(url, self.payload)


def _payload(**overrides) -> dict:
    payload = {"client_id": CLIENT_ID, "redirect_uris": [REDIRECT_URI]}
    payload.update(overrides)
    return payload


def _controller(fetcher: FakeFetcher, store: AuthorizationCodeStore = None):
    return AuthorizeFlowController(
        fetcher=fetcher,
        code_store=store if store is not None else AuthorizationCodeStore(),
        login=LoginSettings(DEMO_USERNAME="demo", DEMO_PASSWORD="demo"),
    )


def _params(**overrides) -> dict:
    params = {
        "response_type": "code",
        "client_id": CLIENT_ID,
        "redirect_uri": REDIRECT_URI,
        "state": "xyz",
    }
    params.update(overrides)
    return {key: value for key, value in params.items() if value is not None}


@pytest.mark.anyio
async def test_first_visit_returns_login_challenge() -> None:
    fetcher = FakeFetcher(_payload())

    outcome = await _controller(fetcher).authorize(_params(scope="openid"))

    assert isinstance(outcome, CredentialChallenge)
    assert outcome.error is None
    assert outcome.params == _params(scope="openid")
    assert fetcher.calls == [CLIENT_ID]


@pytest.mark.anyio
async def test_correct_credentials_redirect_with_code_and_state() -> None:
    store = AuthorizationCodeStore()
    controller = _controller(FakeFetcher(_payload()), store)

    outcome = await controller.authorize(_params(username="demo", password="demo"))

    assert isinstance(outcome, AuthorizeRedirect)
    location = urlsplit(outcome.location)
    assert f"{location.scheme}://{location.netloc}{location.path}" == REDIRECT_URI
    query = parse_qs(location.query)
    assert query["state"] == ["xyz"]
    grant = store.redeem(query["code"][0])
    assert grant.client_id == CLIENT_ID
    assert grant.redirect_uri == REDIRECT_URI
    assert grant.state == "xyz"


@pytest.mark.anyio
async def test_state_is_omitted_when_not_supplied() -> None:
    controller = _controller(FakeFetcher(_payload()))

    outcome = await controller.authorize(
        _params(state=None, username="demo", password="demo")
    )

    query = parse_qs(urlsplit(outcome.location).query)
    assert "state" not in query
    assert "code" in query


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("username", "password"),
    [("demo", "wrong"), ("admin", "demo"), ("", ""), ("demo", "")],
)
async def test_wrong_credentials_challenge_again(username: str, password: str) -> None:
    store = AuthorizationCodeStore()
    controller = _controller(FakeFetcher(_payload()), store)

    outcome = await controller.authorize(
        _params(username=username, password=password)
    )

    assert isinstance(outcome, CredentialChallenge)
    assert outcome.error == "Invalid username or password"
    assert "username" not in outcome.params
    assert "password" not in outcome.params
    assert outcome.params["state"] == "xyz"
    assert len(store) == 0


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("missing", "description"),
    [
        ("client_id", "client_id is required"),
        ("response_type", "response_type is required"),
    ],
)
async def test_required_parameters(missing: str, description: str) -> None:
    fetcher = FakeFetcher(_payload())

    with pytest.raises(OAuthError) as excinfo:
        await _controller(fetcher).authorize(_params(**{missing: None}))

    assert excinfo.value.error == "invalid_request"
    assert excinfo.value.description == description
    assert fetcher.calls == []


@pytest.mark.anyio
@pytest.mark.parametrize("response_type", ["token", "id_token", "code token"])
async def test_unsupported_response_type_never_fetches(response_type: str) -> None:
    fetcher = FakeFetcher(_payload())

    with pytest.raises(OAuthError) as excinfo:
        await _controller(fetcher).authorize(_params(response_type=response_type))

    assert excinfo.value.error == "unsupported_response_type"
    assert fetcher.calls == []


@pytest.mark.anyio
async def test_invalid_client_id_never_fetches() -> None:
    fetcher = FakeFetcher(_payload())

    with pytest.raises(OAuthError) as excinfo:
        await _controller(fetcher).authorize(
            _params(client_id="http://ex.test/md.json")
        )

    assert excinfo.value.error == "invalid_request"
    assert excinfo.value.reason is ClientIdFailure.SCHEME_NOT_HTTPS
    assert "https" in excinfo.value.description
    assert fetcher.calls == []


@pytest.mark.anyio
async def test_metadata_failure_becomes_invalid_request() -> None:
    fetcher = FakeFetcher(
        error=ClientMetadataError(MetadataFailure.FETCH_FAILED, "HTTP 404")
    )

    with pytest.raises(OAuthError) as excinfo:
        await _controller(fetcher).authorize(_params())

    assert excinfo.value.error == "invalid_request"
    assert excinfo.value.reason is MetadataFailure.FETCH_FAILED
    assert "HTTP 404" in excinfo.value.description


@pytest.mark.anyio
async def test_metadata_rules_are_checked_before_redirect_uri() -> None:
    fetcher = FakeFetcher(_payload(token_endpoint_auth_method="client_secret_basic"))

    with pytest.raises(OAuthError) as excinfo:
        await _controller(fetcher).authorize(
            _params(redirect_uri="https://unregistered.test/cb")
        )

    assert excinfo.value.reason is MetadataFailure.FORBIDDEN_AUTH_METHOD


@pytest.mark.anyio
async def test_unregistered_redirect_uri_is_rejected_before_login() -> None:
    store = AuthorizationCodeStore()
    controller = _controller(FakeFetcher(_payload()), store)

    with pytest.raises(OAuthError) as excinfo:
        await controller.authorize(
            _params(redirect_uri="https://ex.test/cb/", username="demo", password="demo")
        )

    assert excinfo.value.error == "invalid_request"
    assert excinfo.value.reason is RedirectFailure.NO_EXACT_MATCH
    assert len(store) == 0


@pytest.mark.anyio
async def test_credential_submission_revalidates_the_client() -> None:
    fetcher = FakeFetcher(_payload())
    controller = _controller(fetcher)

    await controller.authorize(_params())
    await controller.authorize(_params(username="demo", password="demo"))

    assert fetcher.calls == [CLIENT_ID, CLIENT_ID]


def test_append_query_params_keeps_existing_query() -> None:
    location = append_query_params(
        "https://ex.test/cb?tenant=a&code=stale", {"code": "abc", "state": "s p"}
    )

    query = parse_qs(urlsplit(location).query)
    assert query == {"tenant": ["a"], "code": ["abc"], "state": ["s p"]}
