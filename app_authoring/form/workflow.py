"""Debounced, last-request-wins input handling and the developer-id mode machine.

Debouncer
    Acts on a stream of values: only a value left alone for `delay` seconds
    is accepted, and only if it differs from the previously accepted value.
    Each accepted value gets a fresh generation number; the action compares
    its generation with the debouncer's current one before touching state,
    so a slow response for an older value can never overwrite a newer one.

WorkflowModeController
    SEARCH (default) ⇄ CREATE, driven by developer-id lookups:
      zero matches + non-blank input → CREATE, suggestions = [input.strip()]
      one or more matches            → SEARCH, suggestions = matched ids
      lookup failure                 → logged, suggestions = [], mode kept
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from app_authoring.errors import LookupFailure
from app_authoring.form.models import SessionMode, SessionState
from app_authoring.form.service import MarketplaceService
from app_authoring.form.settings import FormSettings

logger = logging.getLogger("app_authoring.form.workflow")

_UNSET = object()


class Debouncer:
    """Debounce + distinct-until-changed + supersession for one input stream.

    Lifecycle:
        d = Debouncer(0.2, action)
        d.push("a"); d.push("ab")     # only "ab" reaches action
        await d.wait_idle()
        d.close()                     # cancels the timer and running actions
    """

    def __init__(
        self,
        delay: float,
        action: Callable[[Any, int], Awaitable[None]],
        name: str = "input",
    ) -> None:
        self._delay = delay
        self._action = action
        self._name = name
        self._timer: asyncio.Task | None = None
        self._running: set[asyncio.Task] = set()
        self._last_accepted: Any = _UNSET
        self._generation = 0
        self._closed = False

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        """True while `generation` is the latest accepted value and not closed."""
        return not self._closed and generation == self._generation

    def push(self, value: Any) -> None:
        if self._closed:
            return
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._accept_after_delay(value))

    async def _accept_after_delay(self, value: Any) -> None:
        await asyncio.sleep(self._delay)
        if value == self._last_accepted:
            return
        self._last_accepted = value
        self._generation += 1
        task = asyncio.get_running_loop().create_task(self._action(value, self._generation))
        self._running.add(task)
        task.add_done_callback(self._on_action_done)

    def _on_action_done(self, task: asyncio.Task) -> None:
        self._running.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("%s action failed: %s", self._name, exc, exc_info=exc)

    async def wait_idle(self) -> None:
        """Return once no timer is pending and no action is running."""
        while True:
            pending = [t for t in [self._timer, *self._running] if t is not None and not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
        for task in list(self._running):
            task.cancel()


class WorkflowModeController:
    """Owns mode / owner_text / suggestions on a SessionState."""

    def __init__(
        self,
        service: MarketplaceService,
        state: SessionState,
        settings: FormSettings | None = None,
    ) -> None:
        self._service = service
        self._state = state
        self._settings = settings or FormSettings()
        self._debouncer = Debouncer(self._settings.debounce_seconds, self._lookup, name="developer lookup")

    @property
    def mode(self) -> SessionMode:
        return self._state.mode

    @property
    def suggestions(self) -> list[str]:
        return list(self._state.suggestions)

    def edit(self, text: str) -> None:
        """Feed one edit of the developer-id input."""
        self._state.owner_text = text
        self._debouncer.push(text)

    async def _lookup(self, text: str, generation: int) -> None:
        try:
            developers = await self._service.search_developers(text, 1, self._settings.owner_page_size)
        except LookupFailure as e:
            logger.error("Can't get developer ids for %r: %s", text, e)
            if self._debouncer.is_current(generation):
                self._state.suggestions = []
            return
        if not self._debouncer.is_current(generation):
            logger.debug("Dropping superseded developer lookup for %r", text)
            return
        self._apply(text, developers)

    def _apply(self, text: str, developers: list[dict[str, Any]] | None) -> None:
        if developers is not None and len(developers) == 0:
            normalized = text.strip()
            if normalized:
                self._state.mode = SessionMode.CREATE
                self._state.suggestions = [normalized]
            else:
                self._state.suggestions = []
            return
        self._state.mode = SessionMode.SEARCH
        self._state.suggestions = [
            d["developerId"] for d in developers or [] if d and d.get("developerId")
        ]

    def reset(self) -> None:
        """Back to SEARCH; used after a failed submission."""
        self._state.mode = SessionMode.SEARCH

    async def wait_idle(self) -> None:
        await self._debouncer.wait_idle()

    def close(self) -> None:
        self._debouncer.close()
