from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from pilgrim.core.errors import ValidationError
from pilgrim.models.enums import ContentKind
from pilgrim.schemas.content import EventPayload, MassSchedulePayload, MediaPayload, NearbyPlacePayload


@dataclass(frozen=True)
class KindDef:
    kind: ContentKind
    title: str
    payload_model: type[BaseModel]
    # code prefix picked from the validated payload (media codes depend on media type)
    code_prefix: Callable[[dict[str, Any]], str]

    def validate(self, payload: dict[str, Any] | BaseModel) -> dict[str, Any]:
        """Validate a raw payload and return its JSON-ready form."""
        if isinstance(payload, self.payload_model):
            return payload.model_dump(mode="json")
        if isinstance(payload, BaseModel):
            payload = payload.model_dump()
        if not isinstance(payload, dict):
            raise ValidationError(f"{self.title} payload must be an object")
        try:
            obj = self.payload_model.model_validate(payload)
        except PydanticValidationError as e:
            errors = [
                {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
                for err in e.errors()
            ]
            raise ValidationError(f"Invalid {self.title} payload", details={"errors": errors}) from e
        return obj.model_dump(mode="json")


_MEDIA_PREFIX = {"image": "IMG", "video": "VID", "model_3d": "M3D"}


# Add a new content kind -> add its payload schema and register it here.
KINDS: dict[ContentKind, KindDef] = {
    ContentKind.MEDIA: KindDef(
        ContentKind.MEDIA, "media", MediaPayload,
        lambda p: _MEDIA_PREFIX.get(p.get("type"), "MED"),
    ),
    ContentKind.MASS_SCHEDULE: KindDef(
        ContentKind.MASS_SCHEDULE, "mass schedule", MassSchedulePayload, lambda p: "SCH",
    ),
    ContentKind.EVENT: KindDef(
        ContentKind.EVENT, "event", EventPayload, lambda p: "EVT",
    ),
    ContentKind.NEARBY_PLACE: KindDef(
        ContentKind.NEARBY_PLACE, "nearby place", NearbyPlacePayload, lambda p: "NBP",
    ),
}


def get_kind(kind: ContentKind | str) -> KindDef:
    try:
        key = ContentKind(kind)
    except ValueError:
        raise ValidationError(
            "Bad content kind",
            details={"kind": str(kind), "allowed": [k.value for k in ContentKind]},
        )
    return KINDS[key]
