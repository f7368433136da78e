import enum


class SystemRole(str, enum.Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    LOCAL_GUIDE = "LOCAL_GUIDE"


class ContentKind(str, enum.Enum):
    MEDIA = "media"
    MASS_SCHEDULE = "mass_schedule"
    EVENT = "event"
    NEARBY_PLACE = "nearby_place"


class ModerationStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    # shift submissions only: an approved schedule retired by a newer approval
    SUPERSEDED = "superseded"


class SubmissionType(str, enum.Enum):
    NEW = "new"
    CHANGE = "change"


class MediaType(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"
    MODEL_3D = "model_3d"


class NearbyPlaceCategory(str, enum.Enum):
    FOOD = "food"
    LODGING = "lodging"
    MEDICAL = "medical"


class AuditEntity(str, enum.Enum):
    CONTENT = "content"
    SHIFT_SUBMISSION = "shift_submission"


class AuditAction(str, enum.Enum):
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    ACTIVATE = "activate"
    DEACTIVATE = "deactivate"
    SUPERSEDE = "supersede"
