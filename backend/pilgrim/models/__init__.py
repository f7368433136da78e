from .enums import (
    AuditAction,
    AuditEntity,
    ContentKind,
    MediaType,
    ModerationStatus,
    NearbyPlaceCategory,
    SubmissionType,
    SystemRole,
)
from .site import Site
from .user import User
from .content_item import ContentItem
from .shift_submission import ShiftSubmission
from .submission_shift import SubmissionShift
from .moderation_audit import ModerationAudit

__all__ = [
    "AuditAction",
    "AuditEntity",
    "ContentKind",
    "MediaType",
    "ModerationStatus",
    "NearbyPlaceCategory",
    "SubmissionType",
    "SystemRole",
    "Site",
    "User",
    "ContentItem",
    "ShiftSubmission",
    "SubmissionShift",
    "ModerationAudit",
]
