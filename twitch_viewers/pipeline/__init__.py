"""Polling pipeline: plan shards, paginate, resolve categories, assemble, submit."""

from .assembler import VIEWER_LABELS, assemble, assemble_chat
from .categories import CategoryResolver
from .chat import ChatStatsJob
from .paginator import PaginationState, apply_minimum_viewers, drain
from .planner import MAX_VALUES_PER_FIELD, plan, validate
from .policy import FireAndForget, MetricsSink, SubmissionPolicy
from .scheduler import PollingLoop
from .streams import StreamViewersJob

__all__ = [
    "MAX_VALUES_PER_FIELD",
    "VIEWER_LABELS",
    "CategoryResolver",
    "ChatStatsJob",
    "FireAndForget",
    "MetricsSink",
    "PaginationState",
    "PollingLoop",
    "StreamViewersJob",
    "SubmissionPolicy",
    "apply_minimum_viewers",
    "assemble",
    "assemble_chat",
    "drain",
    "plan",
    "validate",
]
