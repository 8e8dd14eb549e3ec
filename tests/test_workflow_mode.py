"""Debounced developer-id lookups and the SEARCH / CREATE mode machine."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from app_authoring.errors import LookupFailure
from app_authoring.form.models import SessionMode, SessionState
from app_authoring.form.settings import FormSettings
from app_authoring.form.workflow import Debouncer, WorkflowModeController

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_FAST = FormSettings(debounce_ms=10)


def _controller(search) -> tuple[WorkflowModeController, SessionState, AsyncMock]:
    service = AsyncMock()
    service.search_developers = search if isinstance(search, AsyncMock) else AsyncMock(return_value=search)
    state = SessionState()
    return WorkflowModeController(service, state, _FAST), state, service


# ---------------------------------------------------------------------------
# Debouncer
# ---------------------------------------------------------------------------


class TestDebouncer:
    @pytest.mark.asyncio
    async def test_only_last_value_in_window_is_accepted(self):
        seen: list[tuple[str, int]] = []

        async def action(value, generation):
            seen.append((value, generation))

        d = Debouncer(0.01, action)
        d.push("a")
        d.push("ab")
        d.push("abc")
        await d.wait_idle()
        assert seen == [("abc", 1)]

    @pytest.mark.asyncio
    async def test_unchanged_value_not_reaccepted(self):
        seen: list[str] = []

        async def action(value, generation):
            seen.append(value)

        d = Debouncer(0.01, action)
        d.push("a")
        await d.wait_idle()
        d.push("ab")
        d.push("a")
        await d.wait_idle()
        assert seen == ["a"]
        assert d.generation == 1

    @pytest.mark.asyncio
    async def test_close_cancels_pending_timer(self):
        action = AsyncMock()
        d = Debouncer(0.01, action)
        d.push("a")
        d.close()
        await d.wait_idle()
        action.assert_not_called()

    @pytest.mark.asyncio
    async def test_push_after_close_ignored(self):
        action = AsyncMock()
        d = Debouncer(0.01, action)
        d.close()
        d.push("a")
        await d.wait_idle()
        action.assert_not_called()
        assert not d.is_current(0)

    @pytest.mark.asyncio
    async def test_action_exception_does_not_escape(self):
        async def action(value, generation):
            raise RuntimeError("boom")

        d = Debouncer(0.01, action)
        d.push("a")
        await d.wait_idle()
        assert d.generation == 1


# ---------------------------------------------------------------------------
# Mode transitions
# ---------------------------------------------------------------------------


class TestModeTransitions:
    @pytest.mark.asyncio
    async def test_zero_matches_switches_to_create(self):
        controller, state, _ = _controller([])

        controller.edit("newOwner123")
        await controller.wait_idle()

        assert controller.mode is SessionMode.CREATE
        assert controller.suggestions == ["newOwner123"]

    @pytest.mark.asyncio
    async def test_create_suggestion_is_trimmed(self):
        controller, _, _ = _controller([])

        controller.edit("  spaced  ")
        await controller.wait_idle()

        assert controller.suggestions == ["spaced"]

    @pytest.mark.asyncio
    async def test_matches_switch_to_search(self):
        controller, state, service = _controller([{"developerId": "acme-1"}, {"developerId": "acme-2"}])
        state.mode = SessionMode.CREATE

        controller.edit("acme")
        await controller.wait_idle()

        assert controller.mode is SessionMode.SEARCH
        assert controller.suggestions == ["acme-1", "acme-2"]
        service.search_developers.assert_awaited_once_with("acme", 1, 20)

    @pytest.mark.asyncio
    async def test_blank_input_with_zero_matches_keeps_mode(self):
        controller, state, _ = _controller([])

        controller.edit("   ")
        await controller.wait_idle()

        assert controller.mode is SessionMode.SEARCH
        assert controller.suggestions == []

    @pytest.mark.asyncio
    async def test_missing_list_means_search_without_suggestions(self):
        controller, state, _ = _controller(None)
        state.mode = SessionMode.CREATE

        controller.edit("acme")
        await controller.wait_idle()

        assert controller.mode is SessionMode.SEARCH
        assert controller.suggestions == []

    @pytest.mark.asyncio
    async def test_lookup_failure_keeps_mode_and_clears_suggestions(self):
        search = AsyncMock(side_effect=LookupFailure("search_developers", "HTTP 503", 503))
        controller, state, _ = _controller(search)
        state.mode = SessionMode.CREATE
        state.suggestions = ["stale"]

        controller.edit("acme")
        await controller.wait_idle()

        assert controller.mode is SessionMode.CREATE
        assert controller.suggestions == []

    @pytest.mark.asyncio
    async def test_owner_text_tracks_every_edit(self):
        controller, state, _ = _controller([])

        controller.edit("a")
        controller.edit("ab")
        assert state.owner_text == "ab"
        await controller.wait_idle()

    def test_reset_returns_to_search(self):
        controller, state, _ = _controller([])
        state.mode = SessionMode.CREATE
        controller.reset()
        assert controller.mode is SessionMode.SEARCH

    def test_mode_descriptions(self):
        assert SessionMode.SEARCH.description == "Developer ID : "
        assert SessionMode.CREATE.description == "Create new Developer with ID : "


# ---------------------------------------------------------------------------
# Supersession
# ---------------------------------------------------------------------------


class TestSupersession:
    @pytest.mark.asyncio
    async def test_edits_within_window_issue_one_lookup(self):
        controller, _, service = _controller([{"developerId": "ab-1"}])

        controller.edit("a")
        controller.edit("ab")
        await controller.wait_idle()

        service.search_developers.assert_awaited_once_with("ab", 1, 20)

    @pytest.mark.asyncio
    async def test_slow_older_lookup_cannot_overwrite_newer(self):
        release = asyncio.Event()

        async def search(query, page, page_size):
            if query == "acme":
                await release.wait()
                return [{"developerId": "acme-1"}]
            return []

        controller, _, _ = _controller(AsyncMock(side_effect=search))

        controller.edit("acme")
        await asyncio.sleep(0.05)   # "acme" accepted, its lookup is blocked
        controller.edit("newbie")
        await asyncio.sleep(0.05)   # "newbie" accepted and answered

        assert controller.mode is SessionMode.CREATE
        assert controller.suggestions == ["newbie"]

        release.set()
        await controller.wait_idle()

        assert controller.mode is SessionMode.CREATE
        assert controller.suggestions == ["newbie"]

    @pytest.mark.asyncio
    async def test_close_discards_inflight_result(self):
        release = asyncio.Event()

        async def search(query, page, page_size):
            await release.wait()
            return [{"developerId": "late"}]

        controller, state, _ = _controller(AsyncMock(side_effect=search))

        controller.edit("late")
        await asyncio.sleep(0.05)
        controller.close()
        release.set()
        await controller.wait_idle()

        assert state.suggestions == []
        assert state.mode is SessionMode.SEARCH
