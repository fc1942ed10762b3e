"""Single-flight orchestration of conversions between the two editors."""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum

import httpx

from .builder import build_request
from .client import ConversionClient
from .config import AppConfig
from .editors import Editor, FocusListener, SelectionListener, Subscription
from .errors import BuildError, NetworkFailure
from .logging import AttemptLogEntry, AttemptLogger, AttemptTimings
from .models import ConversionDirection, ConversionOptions, ConversionOutcome, EditorMutation, EditorRole
from .prefixes import PrefixConfig, PrefixField, PrefixStore
from .reconciler import diagnostic, reconcile
from .tracking import NullTracker, Tracker
from .utils import generate_attempt_id
from .validation import OutcomeKind, PreValidator

logger = logging.getLogger(__name__)


class ControllerState(str, Enum):
    IDLE = "idle"
    BUSY = "busy"


def try_begin(state: ControllerState) -> ControllerState | None:
    """Return the state after starting a conversion, or ``None`` if refused."""

    if state is ControllerState.BUSY:
        return None
    return ControllerState.BUSY


def finish(state: ControllerState) -> ControllerState:
    return ControllerState.IDLE


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class ConversionController:
    """Runs at most one conversion at a time, in either direction.

    A trigger that arrives while a conversion is in flight is dropped, not
    queued. The target editor is written while the controller is still busy,
    so change notifications raised by that write cannot start the opposite
    conversion.
    """

    def __init__(
        self,
        markup_editor: Editor,
        code_editor: Editor,
        client: ConversionClient,
        *,
        prefixes: PrefixStore | None = None,
        options: ConversionOptions | None = None,
        tracker: Tracker | None = None,
        attempt_logger: AttemptLogger | None = None,
        validator: PreValidator | None = None,
        environment: str = "production",
        auto_convert: bool = False,
    ) -> None:
        self._editors: dict[EditorRole, Editor] = {"markup": markup_editor, "code": code_editor}
        self._client = client
        self.prefixes = prefixes or PrefixStore()
        self.options = options or ConversionOptions()
        self._tracker: Tracker = tracker or NullTracker()
        self._attempt_logger = attempt_logger
        self._validator = validator or PreValidator()
        self.environment = environment
        self._state = ControllerState.IDLE
        self._last_task: asyncio.Task[ConversionOutcome] | None = None
        self._unsubscribe_prefixes = self.prefixes.subscribe(self._on_prefix_changed)
        self._subscriptions: list[Subscription] = []
        for role, editor in self._editors.items():
            self._subscriptions.append(editor.on_focus(self._focus_tracker(role)))
            self._subscriptions.append(editor.on_selection_changed(self._selection_tracker(role)))
        if auto_convert:
            self._subscriptions.append(
                markup_editor.on_content_changed(lambda _: self._auto_trigger(ConversionDirection.TO_CODE))
            )
            self._subscriptions.append(
                code_editor.on_content_changed(lambda _: self._auto_trigger(ConversionDirection.TO_MARKUP))
            )

    @property
    def state(self) -> ControllerState:
        return self._state

    def editor(self, role: EditorRole) -> Editor:
        return self._editors[role]

    async def convert(self, direction: ConversionDirection | str) -> ConversionOutcome | None:
        """Run one conversion; ``None`` means the trigger was dropped."""

        direction = ConversionDirection(direction)
        if not self._acquire(direction):
            return None
        return await self._run(direction)

    def trigger(self, direction: ConversionDirection | str) -> asyncio.Task[ConversionOutcome] | None:
        """Schedule a conversion on the running loop, checking the gate now."""

        direction = ConversionDirection(direction)
        loop = asyncio.get_running_loop()
        if not self._acquire(direction):
            return None
        task = loop.create_task(self._run(direction))
        self._last_task = task
        return task

    async def drain(self) -> ConversionOutcome | None:
        """Wait for the most recently scheduled conversion."""

        task = self._last_task
        if task is None:
            return None
        return await task

    def set_prefix(self, field: PrefixField | str, value: str) -> None:
        self.prefixes.set(field, value)

    def set_children_mode(self, enabled: bool) -> None:
        if self.options.children_mode == enabled:
            return
        self.options.children_mode = enabled
        self._reconvert_markup()

    def close(self) -> None:
        self._unsubscribe_prefixes()
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions.clear()

    def snapshot(self) -> dict[str, object]:
        prefixes: PrefixConfig = self.prefixes.get()
        return {
            "state": self._state.value,
            "environment": self.environment,
            "markup": self._editors["markup"].get_text(),
            "code": self._editors["code"].get_text(),
            "prefixes": prefixes.as_payload(),
            "childrenMode": self.options.children_mode,
        }

    def _acquire(self, direction: ConversionDirection) -> bool:
        next_state = try_begin(self._state)
        if next_state is None:
            logger.info("Dropped %s trigger: a conversion is already in progress", direction.value)
            self._tracker.track("conversion_dropped", {"direction": direction.value})
            return False
        self._state = next_state
        return True

    async def _run(self, direction: ConversionDirection) -> ConversionOutcome:
        attempt_id = generate_attempt_id()
        timings = AttemptTimings()
        http_status: int | None = None
        dispatched = False
        rewritten = False
        request_bytes = 0
        self._tracker.track("conversion_started", {"direction": direction.value, "attempt_id": attempt_id})
        try:
            source = self._editors[direction.source].get_text()
            build_start = time.perf_counter()
            try:
                request, validation = build_request(
                    direction,
                    source,
                    self.prefixes.get(),
                    self.options,
                    validator=self._validator,
                )
            except BuildError as exc:
                timings.build_ms = _elapsed_ms(build_start)
                logger.info("%s not dispatched (%s): %s", direction.value, exc.code.value, exc.rule or "input")
                mutation = diagnostic(direction, exc.code, str(exc))
            else:
                timings.build_ms = _elapsed_ms(build_start)
                rewritten = validation is not None and validation.kind is OutcomeKind.REWRITE
                request_bytes = len(request.to_json())
                dispatched = True
                dispatch_start = time.perf_counter()
                try:
                    raw = await self._client.send(request)
                except NetworkFailure as exc:
                    timings.dispatch_ms = _elapsed_ms(dispatch_start)
                    mutation = diagnostic(direction, exc.code, f"Network error: {exc}")
                else:
                    timings.dispatch_ms = _elapsed_ms(dispatch_start)
                    http_status = raw.status_code
                    reconcile_start = time.perf_counter()
                    mutation = reconcile(direction, raw.status_code, raw.text)
                    timings.reconcile_ms = _elapsed_ms(reconcile_start)
            self._apply(mutation)
            outcome = ConversionOutcome(
                attempt_id=attempt_id,
                direction=direction,
                dispatched=dispatched,
                mutation=mutation,
                http_status=http_status,
                rewritten=rewritten,
            )
            try:
                self._record(outcome, timings, request_bytes)
            except OSError:
                logger.warning("Could not append attempt %s to the attempt log", attempt_id, exc_info=True)
            return outcome
        finally:
            self._state = finish(self._state)

    def _apply(self, mutation: EditorMutation) -> None:
        self._editors[mutation.target].set_text(mutation.content)

    def _record(self, outcome: ConversionOutcome, timings: AttemptTimings, request_bytes: int) -> None:
        error_code = outcome.error_code.value if outcome.error_code else None
        self._tracker.track(
            "conversion_finished",
            {
                "direction": outcome.direction.value,
                "attempt_id": outcome.attempt_id,
                "dispatched": outcome.dispatched,
                "http_status": outcome.http_status,
                "error_code": error_code,
            },
        )
        if self._attempt_logger is None:
            return
        self._attempt_logger.append(
            AttemptLogEntry(
                attempt_id=outcome.attempt_id,
                direction=outcome.direction.value,
                environment=self.environment,
                status="success" if outcome.ok else "failure",
                http_status=outcome.http_status,
                error_code=error_code,
                timings=timings,
                request_bytes=request_bytes,
                rewritten=outcome.rewritten,
            )
        )

    def _on_prefix_changed(self, field: PrefixField, value: str) -> None:
        self._reconvert_markup()

    def _reconvert_markup(self) -> None:
        if self._editors["markup"].get_text().strip():
            self._auto_trigger(ConversionDirection.TO_CODE)

    def _auto_trigger(self, direction: ConversionDirection) -> None:
        if _running_loop() is not None:
            self.trigger(direction)
        else:
            asyncio.run(self.convert(direction))

    def _focus_tracker(self, role: EditorRole) -> FocusListener:
        def listener() -> None:
            self._tracker.track(f"focus_{role}_editor")

        return listener

    def _selection_tracker(self, role: EditorRole) -> SelectionListener:
        def listener(start: int, end: int) -> None:
            self._tracker.track(f"select_{role}_text", {"length": end - start})

        return listener


def create_controller(
    config: AppConfig,
    *,
    environment: str,
    markup_editor: Editor,
    code_editor: Editor,
    service_url: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    tracker: Tracker | None = None,
) -> ConversionController:
    client = ConversionClient(
        service_url or config.base_url(environment),
        config.service.endpoint,
        timeout_s=config.service.timeout_s,
        transport=transport,
    )
    attempt_logger = AttemptLogger(config.log.attempt_log) if config.log.attempt_log else None
    return ConversionController(
        markup_editor,
        code_editor,
        client,
        prefixes=PrefixStore(PrefixConfig.from_defaults(config.prefixes)),
        options=ConversionOptions(children_mode=config.editor.children_mode),
        tracker=tracker,
        attempt_logger=attempt_logger,
        environment=environment,
        auto_convert=config.editor.auto_convert,
    )


__all__ = ["ConversionController", "ControllerState", "create_controller", "finish", "try_begin"]
