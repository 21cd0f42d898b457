import pytest
import requests

from charles_sturt_scraper.http_client import FetchError, HttpTransport


class _Response:
    def __init__(self, status_code, text=""):
        self.status_code = status_code
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400


class _Session:
    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.headers = {}
        self.requests = []
        self.closed = False

    def request(self, method, url, data=None, headers=None, timeout=None):
        self.requests.append({"method": method, "url": url, "data": data, "headers": headers, "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def close(self):
        self.closed = True


def _transport(outcomes, retries=2):
    sleeps = []
    session = _Session(outcomes)
    transport = HttpTransport(
        timeout=5,
        retries=retries,
        backoff_s=1.0,
        min_interval_s=0.0,
        session=session,
        sleep_fn=sleeps.append,
    )
    return transport, session, sleeps


def test_get_returns_body():
    transport, session, _ = _transport([_Response(200, "<html>ok</html>")])
    assert transport.get("https://example.local/") == "<html>ok</html>"
    assert session.requests[0]["method"] == "GET"
    assert session.requests[0]["data"] is None
    assert session.requests[0]["timeout"] == 5
    assert session.headers["User-Agent"]


def test_post_hands_form_fields_to_requests():
    transport, session, _ = _transport([_Response(200, "page 2")])
    body = transport.post(
        "https://example.local/",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
        form_fields={"__EVENTARGUMENT": "Page$2", "__VIEWSTATE": "a b"},
    )
    assert body == "page 2"
    sent = session.requests[0]
    assert sent["method"] == "POST"
    assert sent["headers"] == {"Content-Type": "application/x-www-form-urlencoded"}
    assert sent["data"] == {"__EVENTARGUMENT": "Page$2", "__VIEWSTATE": "a b"}


def test_retries_transient_status_then_succeeds():
    transport, session, sleeps = _transport([_Response(503), _Response(200, "ok")])
    assert transport.get("https://example.local/") == "ok"
    assert len(session.requests) == 2
    assert sleeps == [1.0]


def test_raises_after_exhausting_retries():
    transport, session, sleeps = _transport([_Response(500), _Response(500), _Response(500)])
    with pytest.raises(FetchError) as excinfo:
        transport.post("https://example.local/", form_fields={"__EVENTARGUMENT": "Page$9"})
    assert excinfo.value.status == 500
    assert len(session.requests) == 3
    assert sleeps == [1.0, 2.0]


def test_non_retryable_status_raises_immediately():
    transport, session, sleeps = _transport([_Response(404)])
    with pytest.raises(FetchError) as excinfo:
        transport.get("https://example.local/missing")
    assert excinfo.value.status == 404
    assert len(session.requests) == 1
    assert sleeps == []


def test_network_errors_become_fetch_errors():
    transport, session, _ = _transport([requests.ConnectionError("refused")], retries=0)
    with pytest.raises(FetchError) as excinfo:
        transport.get("https://example.local/")
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)
    assert excinfo.value.status is None


def test_network_errors_are_retried():
    transport, session, sleeps = _transport([requests.Timeout("slow"), _Response(200, "ok")])
    assert transport.get("https://example.local/") == "ok"
    assert sleeps == [1.0]


def test_file_urls_read_saved_pages(tmp_path):
    page = tmp_path / "page.html"
    page.write_text("<html>saved</html>", encoding="utf-8")
    transport, session, _ = _transport([])

    assert transport.get(page.as_uri()) == "<html>saved</html>"
    with pytest.raises(FetchError):
        transport.post(page.as_uri(), form_fields={"__EVENTARGUMENT": "Page$2"})
    with pytest.raises(FetchError):
        transport.get((tmp_path / "missing.html").as_uri())
    assert session.requests == []


def test_file_urls_with_escaped_characters(tmp_path):
    folder = tmp_path / "saved pages 100%"
    folder.mkdir()
    page = folder / "p1.html"
    page.write_text("<html>escaped</html>", encoding="utf-8")
    transport, _, _ = _transport([])

    assert "%20" in page.as_uri()
    assert transport.get(page.as_uri()) == "<html>escaped</html>"


def test_rate_limiter_spaces_requests():
    sleeps = []
    session = _Session([_Response(200, "a"), _Response(200, "b")])
    transport = HttpTransport(min_interval_s=10.0, session=session, sleep_fn=sleeps.append)
    transport.get("https://example.local/1")
    transport.get("https://example.local/2")
    assert len(sleeps) == 1
    assert 0 < sleeps[0] <= 10.0


def test_close_closes_session():
    transport, session, _ = _transport([])
    transport.close()
    assert session.closed
