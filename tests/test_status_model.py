"""
Unit tests for the status flags model and stage projection.
"""

import itertools

import pytest

from app.core.exceptions import InvalidFieldError
from app.models.application import (
    STAGE_PRIORITY, Stage, StatusField, StatusFlags, derive_stage,
    normalize_status_field, parse_stage
)


def flags(**set_fields) -> StatusFlags:
    """All flags false except the ones named."""
    values = {field.name: False for field in StatusField}
    values.update(set_fields)
    return StatusFlags(**values)


class TestDeriveStage:

    def test_new_application_is_applied(self):
        assert derive_stage(StatusFlags()) == Stage.applied

    def test_no_flags_is_unknown(self):
        assert derive_stage(flags()) == Stage.unknown

    @pytest.mark.parametrize("field,stage", [
        ("applied", Stage.applied),
        ("shortlisted", Stage.shortlisted),
        ("interview_scheduled", Stage.interview),
        ("technical_round", Stage.technical),
        ("offer_made", Stage.offer),
        ("offer_accepted", Stage.accepted),
    ])
    def test_single_flag(self, field, stage):
        assert derive_stage(flags(**{field: True})) == stage

    def test_offer_beats_shortlisted(self):
        result = derive_stage(flags(applied=True, shortlisted=True, offer_made=True))
        assert result == Stage.offer

    def test_accepted_without_offer_made(self):
        assert derive_stage(flags(applied=True, offer_accepted=True)) == Stage.accepted

    def test_every_combination_picks_most_senior_flag(self):
        names = [field.name for field in StatusField]
        for combo in itertools.product([False, True], repeat=len(names)):
            current = StatusFlags(**dict(zip(names, combo)))
            expected = next(
                (stage for field, stage in STAGE_PRIORITY if current.is_set(field)),
                Stage.unknown
            )
            assert derive_stage(current) == expected


class TestNormalizeStatusField:

    @pytest.mark.parametrize("name", [f.value for f in StatusField])
    def test_wire_names(self, name):
        assert normalize_status_field(name).value == name

    @pytest.mark.parametrize("name,expected", [
        ("statusApplied", StatusField.applied),
        ("statusInterviewScheduled", StatusField.interview_scheduled),
        ("statusOfferAccepted", StatusField.offer_accepted),
    ])
    def test_prefixed_names(self, name, expected):
        assert normalize_status_field(name) == expected

    @pytest.mark.parametrize("name", ["notARealField", "status", "", "OFFERMADE", "rejected"])
    def test_unknown_names_rejected(self, name):
        with pytest.raises(InvalidFieldError):
            normalize_status_field(name)

    def test_columns_are_whitelisted(self):
        assert StatusField.technical_round.column == "status_technical_round"
        assert {f.column for f in StatusField} == {
            "status_applied", "status_shortlisted", "status_interview_scheduled",
            "status_technical_round", "status_offer_made", "status_offer_accepted",
        }


class TestStatusFlags:

    def test_serializes_with_wire_names(self):
        dumped = StatusFlags(offer_made=True).model_dump(by_alias=True)
        assert dumped == {
            "applied": True,
            "shortlisted": False,
            "interviewScheduled": False,
            "technicalRound": False,
            "offerMade": True,
            "offerAccepted": False,
        }

    def test_from_row_coerces_integers(self):
        row = {
            "status_applied": 1, "status_shortlisted": 0, "status_interview_scheduled": 0,
            "status_technical_round": 1, "status_offer_made": 0, "status_offer_accepted": 0,
        }
        result = StatusFlags.from_row(row)
        assert result.technical_round is True
        assert result.shortlisted is False


class TestParseStage:

    def test_case_insensitive(self):
        assert parse_stage("offer") == Stage.offer
        assert parse_stage(" Accepted ") == Stage.accepted

    def test_unknown_label(self):
        with pytest.raises(InvalidFieldError):
            parse_stage("Selected")
