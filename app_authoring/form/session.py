"""One authoring session: create a new app, or edit one version of an existing app.

Lifecycle:
    session = AuthoringSession(service, PageContext.new(), on_exit=navigate)
    await session.open()                   # type list (NEW) or record + fields (EDIT)
    session.set_static("type", "game")     # NEW: debounced schema selection
    session.edit_owner("acme")             # debounced developer-id lookup
    await session.submit({"name": "X", ...})
    session.close()                        # teardown; pending work is cancelled

The host reads `fields`, `mode`, `suggestions`, `submitting` and friends to
render. on_exit(reason) is called once when the session ends on its own:
"submitted" after a successful save, "record_unavailable" when an edit
session cannot load its record or the record's type.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from app_authoring.errors import LookupFailure, SchemaDepthError, SubmissionFailure
from app_authoring.form.models import FieldDefinition, PageContext, SessionMode, SessionState
from app_authoring.form.payload import assemble_payload
from app_authoring.form.resolve import SchemaResolutionEngine
from app_authoring.form.service import MarketplaceService
from app_authoring.form.settings import FormSettings
from app_authoring.form.workflow import Debouncer, WorkflowModeController

logger = logging.getLogger("app_authoring.form.session")

EXIT_SUBMITTED = "submitted"
EXIT_RECORD_UNAVAILABLE = "record_unavailable"


class AuthoringSession:
    def __init__(
        self,
        service: MarketplaceService,
        context: PageContext,
        settings: FormSettings | None = None,
        on_exit: Callable[[str], None] | None = None,
    ) -> None:
        self.context = context
        self.settings = settings or FormSettings()
        self.state = SessionState()
        self._service = service
        self._on_exit = on_exit
        self._engine = SchemaResolutionEngine(service, self.settings)
        self._modes = WorkflowModeController(service, self.state, self.settings)
        self._type_selection = Debouncer(
            self.settings.debounce_seconds, self._select_type, name="application type selection"
        )

    # ------------------------------------------------------------------
    # Read-only view for the host
    # ------------------------------------------------------------------

    @property
    def fields(self) -> list[FieldDefinition]:
        return self.state.fields

    @property
    def mode(self) -> SessionMode | None:
        """Developer-id mode; None in an edit session, which has no owner input."""
        if not self.context.is_new:
            return None
        return self.state.mode

    @property
    def suggestions(self) -> list[str]:
        return list(self.state.suggestions)

    @property
    def submitting(self) -> bool:
        return self.state.submitting

    @property
    def type_items(self) -> list[str]:
        return list(self.state.type_items)

    @property
    def static_values(self) -> dict[str, Any]:
        return dict(self.state.static_values)

    @property
    def closed(self) -> bool:
        return self.state.closed

    @property
    def exit_reason(self) -> str | None:
        return self.state.exit_reason

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def open(self) -> None:
        if self.context.is_new:
            type_items = await self._engine.load_type_items()
            if not self.state.closed:
                self.state.type_items = type_items
        else:
            await self._load_record()

    async def _load_record(self) -> None:
        record_id, version = self.context.record_id, self.context.version_number
        try:
            record = await self._engine.load_record(record_id, version)
        except LookupFailure as e:
            logger.error("Can't load app %s version %s: %s", record_id, version, e)
            self._exit(EXIT_RECORD_UNAVAILABLE)
            return
        if self.state.closed:
            return
        if not record:
            logger.error("App %s version %s: empty response", record_id, version)
            self._exit(EXIT_RECORD_UNAVAILABLE)
            return

        try:
            fields = await self._engine.resolve_for_record(record)
        except (LookupFailure, SchemaDepthError) as e:
            logger.error("Can't load application type %r for app %s: %s", record.get("type"), record_id, e)
            self._exit(EXIT_RECORD_UNAVAILABLE)
            return
        if self.state.closed:
            return

        self.state.static_values["name"] = record.get("name")
        self.state.static_values["safeName"] = record.get("safeName")
        self.state.fields = fields

    def set_static(self, name: str, value: Any) -> None:
        """Set a static form value. In a NEW session, "type" selects the schema."""
        self.state.static_values[name] = value
        if self.context.is_new and name == "type":
            self._type_selection.push(value)

    async def _select_type(self, type_id: str | None, generation: int) -> None:
        self.state.fields = []
        if not type_id:
            return
        fields = await self._engine.resolve_for_type(type_id)
        if self._type_selection.is_current(generation):
            self.state.fields = fields

    def edit_owner(self, text: str) -> None:
        if not self.context.is_new:
            logger.debug("Developer-id input ignored in an edit session")
            return
        self._modes.edit(text)

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self, field_values: dict[str, Any], static_values: dict[str, Any] | None = None) -> bool:
        """Save the app. Returns True on success, False otherwise.

        While a submission is in flight, further calls return False without
        reaching the service.
        """
        if self.state.closed:
            logger.warning("Submit on a closed session ignored")
            return False
        if self.state.submitting:
            logger.warning("Submission already in progress; duplicate submit ignored")
            return False
        self.state.submitting = True

        if static_values:
            self.state.static_values.update(static_values)
        payload = assemble_payload(self.context, self.state.static_values, field_values)

        try:
            if self.context.is_new:
                ok = bool(await self._service.create_app(payload))
            else:
                ok = bool(await self._service.update_app_version(
                    self.context.record_id, self.context.version_number, payload
                ))
        except SubmissionFailure as e:
            logger.error("Submission failed: %s", e)
            ok = False
        finally:
            self.state.submitting = False

        if not ok:
            logger.warning("Can't %s app.", "save a new" if self.context.is_new else "update")
            self._modes.reset()
            return False

        self._exit(EXIT_SUBMITTED)
        return True

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def wait_idle(self) -> None:
        """Wait until no debounced input or lookup is outstanding."""
        await self._type_selection.wait_idle()
        await self._modes.wait_idle()

    def _exit(self, reason: str) -> None:
        if self.state.closed:
            return
        self.state.exit_reason = reason
        self.close()
        if self._on_exit is not None:
            self._on_exit(reason)

    def close(self) -> None:
        """Tear down: cancel pending lookups so nothing mutates this session again."""
        self.state.closed = True
        self._modes.close()
        self._type_selection.close()
