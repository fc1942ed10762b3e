from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from htmlgo_bridge.client import ConversionClient
from htmlgo_bridge.controller import ControllerState, ConversionController, finish, try_begin
from htmlgo_bridge.editors import TextBuffer
from htmlgo_bridge.errors import ErrorCode
from htmlgo_bridge.logging import AttemptLogger, read_entries
from htmlgo_bridge.models import ConversionDirection
from htmlgo_bridge.prefixes import PrefixField
from htmlgo_bridge.tracking import LoggingTracker

SAMPLE_HTML = '<div class="container"><h1 class="text-xl font-bold">Hello World</h1></div>'
TO_CODE = ConversionDirection.TO_CODE
TO_MARKUP = ConversionDirection.TO_MARKUP


class Recorder:
    """Fake conversion service that records every request body."""

    def __init__(self, status: int = 200, body: dict | None = None) -> None:
        self.status = status
        self.body = body
        self.payloads: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.payloads.append(payload)
        if self.body is not None:
            return httpx.Response(self.status, json=self.body)
        if payload["direction"] == "html2go":
            return httpx.Response(200, json={"code": "h.Div()"})
        return httpx.Response(501, json={"error": "Go to HTML conversion is not implemented yet"})


def build_controller(handler, *, markup: str = "", code: str = "", **kwargs) -> ConversionController:
    client = ConversionClient("http://converter.test", transport=httpx.MockTransport(handler))
    return ConversionController(TextBuffer("markup", markup), TextBuffer("code", code), client, **kwargs)


def test_state_transitions() -> None:
    assert try_begin(ControllerState.IDLE) is ControllerState.BUSY
    assert try_begin(ControllerState.BUSY) is None
    assert finish(ControllerState.BUSY) is ControllerState.IDLE
    assert finish(ControllerState.IDLE) is ControllerState.IDLE


def test_forward_conversion_updates_code_editor() -> None:
    service = Recorder()
    controller = build_controller(service, markup=SAMPLE_HTML)

    outcome = asyncio.run(controller.convert(TO_CODE))

    assert outcome is not None and outcome.ok
    assert outcome.dispatched and outcome.http_status == 200
    assert service.payloads == [
        {
            "direction": "html2go",
            "html": SAMPLE_HTML,
            "packagePrefix": "h",
            "vuetifyPrefix": "v",
            "vuetifyXPrefix": "vx",
            "childrenMode": False,
        }
    ]
    assert controller.editor("code").get_text() == "h.Div()"
    assert controller.state is ControllerState.IDLE


def test_empty_markup_is_never_dispatched() -> None:
    service = Recorder()
    controller = build_controller(service, markup="  \n")

    outcome = asyncio.run(controller.convert(TO_CODE))

    assert outcome is not None and not outcome.dispatched
    assert outcome.error_code is ErrorCode.EMPTY_INPUT
    assert service.payloads == []
    assert controller.editor("code").get_text() == "// Please enter HTML in the markup editor"
    assert controller.state is ControllerState.IDLE


def test_inline_conditional_is_rejected_locally() -> None:
    service = Recorder()
    controller = build_controller(service, code="var n = if true { 1 }")

    outcome = asyncio.run(controller.convert(TO_MARKUP))

    assert outcome is not None and outcome.error_code is ErrorCode.LOCAL_STRUCTURAL_DEFECT
    assert service.payloads == []
    markup = controller.editor("markup").get_text()
    assert markup.startswith("<!--") and markup.endswith("-->")
    assert "func() string" in markup
    assert "map[bool]string" in markup


def test_mismatched_braces_are_rejected_locally() -> None:
    service = Recorder()
    controller = build_controller(service, code="var n = h.Div() { { { } }")

    asyncio.run(controller.convert(TO_MARKUP))

    assert service.payloads == []
    assert controller.editor("markup").get_text() == "<!-- mismatched braces, open: 3, close: 2 -->"


def test_remote_validation_error_is_shown_in_code_editor() -> None:
    service = Recorder(400, {"error": "HTML content is required"})
    controller = build_controller(service, markup="<div></div>")

    outcome = asyncio.run(controller.convert(TO_CODE))

    assert outcome is not None and outcome.http_status == 400
    assert outcome.error_code is ErrorCode.REMOTE_VALIDATION_ERROR
    assert controller.editor("code").get_text() == "// HTML content is required"


def test_reverse_not_implemented_is_shown_in_markup_editor() -> None:
    service = Recorder()
    controller = build_controller(service, code="n := h.Div()")

    outcome = asyncio.run(controller.convert(TO_MARKUP))

    assert service.payloads == [{"direction": "go2html", "goCode": "n := h.Div()"}]
    assert outcome is not None and outcome.http_status == 501
    assert controller.editor("markup").get_text() == "<!-- Go to HTML conversion is not implemented yet -->"


def test_reverse_conversion_sends_rewritten_code() -> None:
    service = Recorder()
    controller = build_controller(service, code="// header\nh.Div()")

    outcome = asyncio.run(controller.convert(TO_MARKUP))

    assert outcome is not None and outcome.rewritten
    assert service.payloads[0]["goCode"] == "var n = h.Div()"


def test_network_failure_becomes_diagnostic() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    controller = build_controller(handler, markup="<div></div>")

    outcome = asyncio.run(controller.convert(TO_CODE))

    assert outcome is not None and outcome.dispatched
    assert outcome.error_code is ErrorCode.NETWORK_FAILURE
    assert controller.editor("code").get_text() == "// Network error: connection refused"
    assert controller.state is ControllerState.IDLE


def test_invalid_service_url_becomes_network_diagnostic() -> None:
    client = ConversionClient("http://[::1", transport=httpx.MockTransport(Recorder()))
    controller = ConversionController(TextBuffer("markup", "<p></p>"), TextBuffer("code"), client)

    outcome = asyncio.run(controller.convert(TO_CODE))

    assert outcome is not None and outcome.dispatched
    assert outcome.error_code is ErrorCode.NETWORK_FAILURE
    assert controller.editor("code").get_text().startswith("// Network error:")
    assert controller.state is ControllerState.IDLE


def test_programming_error_in_handler_still_releases_controller() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise ValueError("boom")

    controller = build_controller(handler, markup="<div></div>")

    with pytest.raises(ValueError):
        asyncio.run(controller.convert(TO_CODE))
    assert controller.state is ControllerState.IDLE


def test_unwritable_attempt_log_does_not_fail_conversion(tmp_path) -> None:
    service = Recorder()
    controller = build_controller(service, markup=SAMPLE_HTML, attempt_logger=AttemptLogger(tmp_path))

    outcome = asyncio.run(controller.convert(TO_CODE))

    assert outcome is not None and outcome.ok
    assert controller.editor("code").get_text() == "h.Div()"
    assert controller.state is ControllerState.IDLE


def test_second_trigger_while_busy_is_dropped() -> None:
    async def scenario():
        release = asyncio.Event()
        calls: list[httpx.Request] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            await release.wait()
            return httpx.Response(200, json={"code": "h.Div()"})

        tracker = LoggingTracker("local")
        controller = build_controller(handler, markup="<div></div>", code="n := h.Div()", tracker=tracker)
        first = asyncio.create_task(controller.convert(TO_CODE))
        await asyncio.sleep(0)
        assert controller.state is ControllerState.BUSY

        dropped_convert = await controller.convert(TO_MARKUP)
        dropped_trigger = controller.trigger(TO_CODE)

        release.set()
        outcome = await first
        return controller, calls, tracker, outcome, dropped_convert, dropped_trigger

    controller, calls, tracker, outcome, dropped_convert, dropped_trigger = asyncio.run(scenario())

    assert dropped_convert is None
    assert dropped_trigger is None
    assert len(calls) == 1
    assert outcome is not None and outcome.ok
    assert controller.state is ControllerState.IDLE
    dropped = [data for event, data in tracker.events if event == "conversion_dropped"]
    assert [data["direction"] for data in dropped] == ["go2html", "html2go"]


def test_auto_convert_does_not_bounce_between_editors() -> None:
    service = Recorder()

    async def scenario() -> ConversionController:
        controller = build_controller(service, auto_convert=True)
        controller.editor("markup").set_text("<div></div>")
        await controller.drain()
        return controller

    controller = asyncio.run(scenario())

    assert [payload["direction"] for payload in service.payloads] == ["html2go"]
    assert controller.editor("code").get_text() == "h.Div()"
    assert controller.editor("markup").get_text() == "<div></div>"


def test_prefix_change_reconverts_non_empty_markup() -> None:
    service = Recorder()

    async def scenario() -> ConversionController:
        controller = build_controller(service, markup=SAMPLE_HTML)
        controller.set_prefix(PrefixField.PRIMARY, "vt")
        await controller.drain()
        return controller

    asyncio.run(scenario())

    assert len(service.payloads) == 1
    assert service.payloads[0]["vuetifyPrefix"] == "vt"
    assert service.payloads[0]["packagePrefix"] == "h"


def test_prefix_change_with_empty_markup_does_nothing() -> None:
    service = Recorder()

    async def scenario() -> object:
        controller = build_controller(service, markup="   ")
        controller.set_prefix(PrefixField.PACKAGE, "x")
        return await controller.drain()

    assert asyncio.run(scenario()) is None
    assert service.payloads == []


def test_prefix_change_outside_event_loop_runs_to_completion() -> None:
    service = Recorder()
    controller = build_controller(service, markup="<p></p>")

    controller.prefixes.set("vuetifyXPrefix", "vtx")

    assert service.payloads[0]["vuetifyXPrefix"] == "vtx"
    assert controller.editor("code").get_text() == "h.Div()"


def test_children_mode_change_reconverts() -> None:
    service = Recorder()
    controller = build_controller(service, markup="<p></p>")

    controller.set_children_mode(True)
    controller.set_children_mode(True)

    assert [payload["childrenMode"] for payload in service.payloads] == [True]


def test_repeated_conversion_sends_identical_requests() -> None:
    bodies: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(request.content)
        return httpx.Response(200, json={"code": "h.Div()"})

    controller = build_controller(handler, markup=SAMPLE_HTML)
    asyncio.run(controller.convert(TO_CODE))
    asyncio.run(controller.convert(TO_CODE))

    assert len(bodies) == 2
    assert bodies[0] == bodies[1]


def test_attempts_are_logged(tmp_path) -> None:
    log_file = tmp_path / "attempts.jsonl"
    controller = build_controller(
        Recorder(),
        markup="<div></div>",
        code="var n = h.Div() {",
        attempt_logger=AttemptLogger(log_file),
        environment="local",
    )
    asyncio.run(controller.convert(TO_CODE))
    asyncio.run(controller.convert(TO_MARKUP))

    entries = read_entries(log_file)
    assert [entry["direction"] for entry in entries] == ["html2go", "go2html"]
    assert entries[0]["status"] == "success"
    assert entries[0]["http_status"] == 200
    assert entries[0]["request_bytes"] > 0
    assert entries[1]["status"] == "failure"
    assert entries[1]["error_code"] == "LOCAL_STRUCTURAL_DEFECT"
    assert entries[1]["http_status"] is None
    assert all(entry["environment"] == "local" for entry in entries)


def test_editor_events_reach_tracker() -> None:
    tracker = LoggingTracker("production")
    controller = build_controller(Recorder(), markup="<div></div>", tracker=tracker)
    markup = controller.editor("markup")
    assert isinstance(markup, TextBuffer)

    markup.focus()
    markup.select(0, 5)
    controller.close()
    markup.focus()

    events = [event for event, _ in tracker.events]
    assert events == ["focus_markup_editor", "select_markup_text"]
    assert tracker.events[1][1] == {"length": 5, "environment": "production", "version": "1.0.0"}
