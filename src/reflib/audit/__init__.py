"""Audit logging for reflib operations.

Main Components
---------------
- AuditLogger: JSONL event logger passed to parse/output operations
- LogEvent: one logged event
"""

from reflib.audit.helpers import generate_run_id, get_iso_timestamp
from reflib.audit.logger import AuditLogger
from reflib.audit.models import LogEvent

__all__ = [
    "AuditLogger",
    "LogEvent",
    "generate_run_id",
    "get_iso_timestamp",
]
