import io
import logging

import httpx
import pytest
import respx
from hal_client import HalClient, HalTransportError, ResourceFactory
from hal_client.logging import LogfmtFormatter, setup_logging
from hal_client.observability import log_event


@respx.mock
def test_request_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="hal_client.client")
    respx.get("http://example.com/api/foo").mock(
        return_value=httpx.Response(200, json={"ok": True})
    )

    with HalClient("http://example.com/api") as cl:
        cl.get("/foo")

    record = next(r for r in caplog.records if r.getMessage() == "hal_request")
    assert record.method == "GET"
    assert record.url == "http://example.com/api/foo"
    assert record.status == 200
    assert record.duration_ms >= 0


@respx.mock
def test_transport_failure_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="hal_client.client")
    respx.get("http://example.com/api/bar").mock(
        side_effect=httpx.ConnectTimeout("boom")
    )

    with HalClient("http://example.com/api") as cl:
        with pytest.raises(HalTransportError):
            cl.get("/bar")

    record = next(r for r in caplog.records if r.getMessage() == "hal_request")
    assert record.status == "exception"
    assert record.error_type == "ConnectTimeout"


@respx.mock
def test_redirect_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="hal_client.client")
    respx.get("http://example.com/api/old").mock(
        return_value=httpx.Response(301, headers={"Location": "/api/new"})
    )
    respx.get("http://example.com/api/new").mock(
        return_value=httpx.Response(200, json={})
    )

    with HalClient("http://example.com/api") as cl:
        cl.get("/old")

    record = next(r for r in caplog.records if r.getMessage() == "hal_redirect")
    assert record.location == "/api/new"
    assert record.redirects == 1
    assert [r.status for r in caplog.records if r.getMessage() == "hal_request"] == [
        301,
        200,
    ]


def test_dropped_links_are_logged(caplog):
    caplog.set_level(logging.DEBUG, logger="hal_client.factory")

    ResourceFactory().create_resource({"_links": {"broken": {"title": "x"}}})

    record = next(
        r for r in caplog.records if r.getMessage() == "hal.link_relation_dropped"
    )
    assert record.rel == "broken"


def test_log_event_drops_reserved_keys(caplog):
    caplog.set_level(logging.INFO, logger="hal_client.observability")

    log_event("custom", name="ignored", method="GET")

    record = next(r for r in caplog.records if r.getMessage() == "custom")
    assert record.name == "hal_client.observability"
    assert record.method == "GET"


def test_logfmt_formatter():
    record = logging.LogRecord(
        "hal_client.client", logging.INFO, __file__, 1, "hal_request", None, None
    )
    record.method = "GET"
    record.url = "http://example.com/a b"
    record.status = 200

    line = LogfmtFormatter().format(record)

    assert line == (
        'level=info logger=hal_client.client event=hal_request method=GET '
        'url="http://example.com/a b" status=200'
    )


def test_logfmt_formatter_quotes_awkward_values():
    record = logging.LogRecord(
        "hal_client.factory", logging.DEBUG, __file__, 1, "hal.link_invalid", None, None
    )
    record.href = 'a"b'
    record.rel = ""
    record.redirects = True

    line = LogfmtFormatter(fields=("href", "rel", "redirects")).format(record)

    assert line == (
        'level=debug logger=hal_client.factory event=hal.link_invalid '
        'href="a\\"b" rel="" redirects=true'
    )


def test_setup_logging_scoped_to_client_logger():
    stream = io.StringIO()
    logger = logging.getLogger("hal_client")
    saved = list(logger.handlers), logger.level
    try:
        handler = setup_logging("info", stream=stream, logger_name="hal_client")
        log_event("hal_redirect", logging.getLogger("hal_client.client"), location="/x")

        assert logger.handlers == [handler]
        assert "event=hal_redirect location=/x" in stream.getvalue()
    finally:
        for h in list(logger.handlers):
            logger.removeHandler(h)
        for h in saved[0]:
            logger.addHandler(h)
        logger.setLevel(saved[1])


def test_setup_logging_replaces_handlers():
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    try:
        setup_logging("debug")
        setup_logging("debug")

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, LogfmtFormatter)
        assert root.level == logging.DEBUG
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved[0]:
            root.addHandler(h)
        root.setLevel(saved[1])
