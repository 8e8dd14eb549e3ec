"""Schema resolution and workflow core for application authoring.

Pure pipeline:
    flatten_fields / strip_prefix / merge_defaults / normalize_options
    resolve_fields - the four above, in order
    assemble_payload - create vs. update request body

Stateful pieces:
    SchemaResolutionEngine - data-service calls feeding resolve_fields
    WorkflowModeController - SEARCH / CREATE developer-id mode machine
    AuthoringSession       - one create or edit session, with submit guard
"""

from app_authoring.form.flatten import flatten_fields
from app_authoring.form.merge import CUSTOM_DATA_PREFIX, DefaultPolicy, merge_defaults, strip_prefix
from app_authoring.form.models import (
    FieldDefinition,
    PageContext,
    PageMode,
    SessionMode,
    SessionState,
    parse_fields,
)
from app_authoring.form.options import normalize_options
from app_authoring.form.payload import assemble_payload
from app_authoring.form.resolve import SchemaResolutionEngine, resolve_fields
from app_authoring.form.session import AuthoringSession
from app_authoring.form.settings import FormSettings
from app_authoring.form.workflow import Debouncer, WorkflowModeController

__all__ = [
    "CUSTOM_DATA_PREFIX",
    "AuthoringSession",
    "Debouncer",
    "DefaultPolicy",
    "FieldDefinition",
    "FormSettings",
    "PageContext",
    "PageMode",
    "SchemaResolutionEngine",
    "SessionMode",
    "SessionState",
    "WorkflowModeController",
    "assemble_payload",
    "flatten_fields",
    "merge_defaults",
    "normalize_options",
    "parse_fields",
    "resolve_fields",
    "strip_prefix",
]
