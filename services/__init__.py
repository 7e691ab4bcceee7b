from .auth_runtime import (
    bootstrap_auth_session_from_query,
    get_authenticated_user,
    restore_auth_session,
    sign_out_user,
)
from .auth_service import AuthService, AuthUser
from .config import AppConfig, get_app_config, supabase_configured
from .container import Tracker, build_tracker
from .errors import (
    MutationInProgressError,
    PreconditionError,
    RemoteOperationError,
    TrackerError,
    ValidationError,
)
from .export_service import export_filename, export_sessions_csv
from .formatting import format_decimal, format_number, minutes_to_mmss, parse_race_time, sec_to_time
from .import_service import ImportReport, import_sessions_csv
from .logging_setup import configure_logging
from .models import RESULT_STROKES, SESSION_STROKES, Confirmed, Pending, PersonalBest, Result, Session
from .personal_bests import PersonalBestAggregator, derive_personal_bests, personal_bests_frame
from .repositories import RecordRepository, ResultRepository, SessionRepository
from .search import QueryDebouncer, page_count, view
from .stats_service import TrainingSummary, build_training_summary
from .store import RemoteStore, SupabaseStore
from .supabase_client import create_supabase_client

__all__ = [
    "AppConfig",
    "AuthService",
    "AuthUser",
    "Confirmed",
    "ImportReport",
    "MutationInProgressError",
    "Pending",
    "PersonalBest",
    "PersonalBestAggregator",
    "PreconditionError",
    "QueryDebouncer",
    "RESULT_STROKES",
    "RecordRepository",
    "RemoteOperationError",
    "RemoteStore",
    "Result",
    "ResultRepository",
    "SESSION_STROKES",
    "Session",
    "SessionRepository",
    "SupabaseStore",
    "Tracker",
    "TrackerError",
    "TrainingSummary",
    "ValidationError",
    "bootstrap_auth_session_from_query",
    "build_tracker",
    "build_training_summary",
    "configure_logging",
    "create_supabase_client",
    "derive_personal_bests",
    "export_filename",
    "export_sessions_csv",
    "format_decimal",
    "format_number",
    "get_app_config",
    "get_authenticated_user",
    "import_sessions_csv",
    "minutes_to_mmss",
    "page_count",
    "parse_race_time",
    "personal_bests_frame",
    "restore_auth_session",
    "sec_to_time",
    "sign_out_user",
    "supabase_configured",
    "view",
]
