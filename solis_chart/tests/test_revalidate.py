import requests

from solis_chart.aggregator import AggregationResult
from solis_chart.config import RevalidateConfig
from solis_chart.logging import get_logger
from solis_chart.page import PageCache
from solis_chart.revalidate import (
    AUTH_BEARER,
    AUTH_BODY,
    MODE_FORWARD,
    MODE_INVALIDATE,
    MODE_REGENERATE,
    RevalidateEndpoint,
    RevalidateHandler,
    default_endpoints,
)
from solis_chart.tests.fakes import FakeResponse, FakeSession


LOG = get_logger("revalidate-test")

GOOD = AggregationResult(daily_totals=[1.0], monthly_total=1.0, month_name="oktober")


class CountingBuilder:
    def __init__(self, result=GOOD):
        self.result = result
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.result


def _handler(session=None, builder=None, **overrides):
    values = {"route": "/api/revalidate", "secret": "s3cret"}
    values.update(overrides)
    builder = builder or CountingBuilder()
    pages = {"/": PageCache(builder, log=LOG)}
    return RevalidateHandler(RevalidateEndpoint(**values), pages, LOG, session=session), builder


def test_bearer_token_regenerates_page():
    handler, builder = _handler(auth=AUTH_BEARER)

    payload, status = handler.handle("GET", {"Authorization": "Bearer s3cret"})

    assert status == 200
    assert payload == {"revalidated": True, "path": "/"}
    assert builder.calls == 1


def test_body_secret_accepted_for_body_auth():
    handler, _ = _handler(auth=AUTH_BODY)

    _, status = handler.handle("POST", {}, {"secret": "s3cret"})
    assert status == 200


def test_body_auth_ignores_bearer_header():
    handler, builder = _handler(auth=AUTH_BODY)

    payload, status = handler.handle("POST", {"Authorization": "Bearer s3cret"}, None)

    assert status == 403
    assert payload == {"message": "Forbidden: Invalid secret"}
    assert builder.calls == 0


def test_wrong_secret_is_forbidden_without_side_effect():
    handler, builder = _handler()

    _, status = handler.handle("POST", {"Authorization": "Bearer nope"}, {"secret": "nope"})

    assert status == 403
    assert builder.calls == 0


def test_unset_secret_rejects_everything():
    handler, _ = _handler(secret="")

    _, status = handler.handle("POST", {"Authorization": "Bearer "}, {"secret": ""})
    assert status == 403


def test_disallowed_method():
    handler, builder = _handler(methods=("GET",))

    payload, status = handler.handle("DELETE", {"Authorization": "Bearer s3cret"})

    assert status == 405
    assert "DELETE" in payload["message"]
    assert builder.calls == 0


def test_invalidate_mode_defers_rebuild():
    handler, builder = _handler(mode=MODE_INVALIDATE)

    payload, status = handler.handle("GET", {"Authorization": "Bearer s3cret"})

    assert status == 202
    assert payload["deferred"] is True
    assert builder.calls == 0
    assert handler.pages["/"].is_stale


def test_failed_regeneration_reports_500():
    handler, _ = _handler(builder=CountingBuilder(AggregationResult.failed()), mode=MODE_REGENERATE)

    payload, status = handler.handle("GET", {"Authorization": "Bearer s3cret"})

    assert status == 500
    assert payload == {"message": "Error revalidating the page"}


def test_unknown_body_path_falls_back_to_endpoint_path():
    handler, _ = _handler()

    payload, status = handler.handle("POST", {}, {"secret": "s3cret", "path": "/elsewhere"})

    assert status == 200
    assert payload["path"] == "/"


def test_forward_mode_calls_site_revalidate_route():
    session = FakeSession({
        "https://site.test/api/revalidate": FakeResponse(200, {"revalidated": True})
    })
    handler, builder = _handler(
        session=session,
        auth=AUTH_BEARER,
        mode=MODE_FORWARD,
        site_url="https://site.test",
        forward_secret="hook",
    )

    payload, status = handler.handle("GET", {"Authorization": "Bearer s3cret"})

    assert status == 200
    assert payload["revalidated"] is True
    assert builder.calls == 0
    call = session.calls[0]
    assert call["json"] == {"path": "/", "secret": "hook"}
    assert call["headers"] == {"Authorization": "Bearer hook"}


def test_forward_mode_upstream_failure():
    session = FakeSession({
        "https://site.test/api/revalidate": FakeResponse(401, text="Unauthorized")
    })
    handler, _ = _handler(session=session, mode=MODE_FORWARD, site_url="https://site.test")

    _, status = handler.handle("GET", {"Authorization": "Bearer s3cret"})
    assert status == 500


def test_forward_mode_transport_error():
    session = FakeSession({
        "https://site.test/api/revalidate": requests.ConnectionError("refused")
    })
    handler, _ = _handler(session=session, mode=MODE_FORWARD, site_url="https://site.test")

    _, status = handler.handle("GET", {"Authorization": "Bearer s3cret"})
    assert status == 500


def test_default_endpoints():
    webhook, cron = default_endpoints(
        RevalidateConfig(cron_secret="c", revalidate_secret="r", site_url="")
    )
    assert webhook.route == "/api/revalidate"
    assert webhook.secret == "r"
    assert cron.route == "/api/cron"
    assert cron.auth == AUTH_BEARER
    assert cron.methods == ("GET",)
    assert cron.mode == MODE_REGENERATE

    _, cron = default_endpoints(
        RevalidateConfig(cron_secret="c", revalidate_secret="r", site_url="https://site.test")
    )
    assert cron.mode == MODE_FORWARD
    assert cron.forward_secret == "r"


def _two_page_handler(**overrides):
    values = {"route": "/api/revalidate", "secret": "s3cret"}
    values.update(overrides)
    root, other = CountingBuilder(), CountingBuilder()
    pages = {"/": PageCache(root, log=LOG), "/other": PageCache(other, log=LOG)}
    return RevalidateHandler(RevalidateEndpoint(**values), pages, LOG), root, other


def test_body_secret_may_choose_registered_path():
    handler, root, other = _two_page_handler()

    payload, status = handler.handle("POST", {}, {"secret": "s3cret", "path": "/other"})

    assert status == 200
    assert payload["path"] == "/other"
    assert (root.calls, other.calls) == (0, 1)


def test_bearer_request_cannot_choose_path_from_body():
    handler, root, other = _two_page_handler()

    payload, status = handler.handle(
        "POST", {"Authorization": "Bearer s3cret"}, {"secret": "wrong", "path": "/other"}
    )

    assert status == 200
    assert payload["path"] == "/"
    assert (root.calls, other.calls) == (1, 0)


def test_handler_reuses_one_session():
    handler, _ = _handler()
    assert isinstance(handler.session, requests.Session)

    session = FakeSession({})
    injected, _ = _handler(session=session)
    assert injected.session is session
