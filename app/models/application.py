"""
Application status model - the six progress flags and the stage they project to.

Flags are independent booleans. Nothing here enforces an order between them:
offerAccepted may be true while offerMade is false. The stage label is a pure
projection of whichever true flag has the highest seniority.
"""

from enum import Enum
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

from app.core.exceptions import InvalidFieldError


class StatusField(str, Enum):
    """Recognized status field names, lowest seniority first."""

    applied = "applied"
    shortlisted = "shortlisted"
    interview_scheduled = "interviewScheduled"
    technical_round = "technicalRound"
    offer_made = "offerMade"
    offer_accepted = "offerAccepted"

    @property
    def column(self) -> str:
        return STATUS_COLUMNS[self]


class Stage(str, Enum):
    applied = "Applied"
    shortlisted = "Shortlisted"
    interview = "Interview"
    technical = "Technical"
    offer = "Offer"
    accepted = "Accepted"
    unknown = "Unknown"


STATUS_COLUMNS = {
    StatusField.applied: "status_applied",
    StatusField.shortlisted: "status_shortlisted",
    StatusField.interview_scheduled: "status_interview_scheduled",
    StatusField.technical_round: "status_technical_round",
    StatusField.offer_made: "status_offer_made",
    StatusField.offer_accepted: "status_offer_accepted",
}

# Highest seniority first
STAGE_PRIORITY = [
    (StatusField.offer_accepted, Stage.accepted),
    (StatusField.offer_made, Stage.offer),
    (StatusField.technical_round, Stage.technical),
    (StatusField.interview_scheduled, Stage.interview),
    (StatusField.shortlisted, Stage.shortlisted),
    (StatusField.applied, Stage.applied),
]


class StatusFlags(BaseModel):
    """The six flags of one application. Serialized with the wire field names."""

    model_config = ConfigDict(populate_by_name=True)

    applied: bool = True
    shortlisted: bool = False
    interview_scheduled: bool = Field(False, alias="interviewScheduled")
    technical_round: bool = Field(False, alias="technicalRound")
    offer_made: bool = Field(False, alias="offerMade")
    offer_accepted: bool = Field(False, alias="offerAccepted")

    def is_set(self, field: StatusField) -> bool:
        return getattr(self, field.name)

    @classmethod
    def from_row(cls, row: Mapping) -> "StatusFlags":
        """Build from a database row keyed by status_* column names."""
        return cls(**{field.name: bool(row[field.column]) for field in StatusField})


def derive_stage(flags: StatusFlags) -> Stage:
    """Return the label of the most senior flag that is set, or Unknown."""
    for field, stage in STAGE_PRIORITY:
        if flags.is_set(field):
            return stage
    return Stage.unknown


def normalize_status_field(name: str) -> StatusField:
    """
    Resolve a caller-supplied field name to a StatusField.

    Accepts the wire names ("offerMade") and the prefixed column-style names
    older clients send ("statusOfferMade"). Raises InvalidFieldError otherwise.
    """
    if not isinstance(name, str):
        raise InvalidFieldError(f"Invalid status field: {name!r}")

    candidate = name
    if candidate.startswith("status") and len(candidate) > len("status"):
        rest = candidate[len("status"):]
        candidate = rest[0].lower() + rest[1:]

    try:
        return StatusField(candidate)
    except ValueError:
        allowed = ", ".join(f.value for f in StatusField)
        raise InvalidFieldError(f"Invalid status field '{name}'. Allowed: {allowed}")


def parse_stage(value: str) -> Stage:
    """Case-insensitive lookup of a stage label, used by list filters."""
    for stage in Stage:
        if stage.value.lower() == value.strip().lower():
            return stage
    raise InvalidFieldError(f"Unknown stage '{value}'")
