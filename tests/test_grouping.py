"""
Tests for lightBath/rod patient grouping
"""
from datetime import date
from itertools import combinations
import pytest
from app.attendances.schemas import AttendanceStatus, CombinedType, DayAttendanceSet, Modality
from app.attendances.grouping import (
    get_combined_label,
    get_combined_type,
    group_day,
    group_patients,
)


def test_group_patient_in_both_modalities(make_record):
    """Test that a patient booked for light bath and rod becomes one combined unit."""
    light_bath = [make_record(10, 1, Modality.LIGHT_BATH, name="A")]
    rod = [make_record(11, 1, Modality.ROD, name="A")]

    units = group_patients(light_bath, rod)

    assert list(units) == [1]
    unit = units[1]
    assert unit.treatment_types == [Modality.LIGHT_BATH, Modality.ROD]
    assert unit.combined_type == CombinedType.COMBINED
    assert unit.original_type == Modality.LIGHT_BATH
    assert unit.attendance_ids == [10, 11]
    assert unit.label == "Light Bath + Rod"


def test_group_rod_only_patient(make_record):
    """Test that a rod-only patient keeps rod as both original and combined type."""
    units = group_patients([], [make_record(20, 2, Modality.ROD)])

    assert units[2].original_type == Modality.ROD
    assert units[2].combined_type == CombinedType.ROD
    assert units[2].treatment_types == [Modality.ROD]


def test_group_drops_records_without_patient(make_record, caplog):
    """Test that records without a patient are skipped with a warning."""
    units = group_patients(
        [make_record(30, None, Modality.LIGHT_BATH)],
        [make_record(31, 3, Modality.ROD)],
    )

    assert list(units) == [3]
    assert "no patient linked" in caplog.text


def test_group_drops_zero_patient_id(make_record):
    """Test that a zero patient id counts as no patient."""
    units = group_patients([make_record(30, 0, Modality.LIGHT_BATH)], [make_record(31, 0, Modality.ROD)])

    assert units == {}


def test_group_preserves_first_appearance_order(make_record):
    """Test output order follows first appearance, light bath list first."""
    light_bath = [make_record(1, 5, Modality.LIGHT_BATH), make_record(2, 3, Modality.LIGHT_BATH)]
    rod = [make_record(3, 9, Modality.ROD), make_record(4, 5, Modality.ROD)]

    units = group_patients(light_bath, rod)

    assert list(units) == [5, 3, 9]
    assert units[5].combined_type == CombinedType.COMBINED
    assert units[9].combined_type == CombinedType.ROD


def test_group_is_deterministic(make_record):
    """Test that grouping the same inputs twice gives equal output."""
    light_bath = [make_record(1, 1, Modality.LIGHT_BATH), make_record(2, 2, Modality.LIGHT_BATH)]
    rod = [make_record(3, 2, Modality.ROD)]

    first = group_patients(light_bath, rod)
    second = group_patients(light_bath, rod)

    assert list(first) == list(second)
    assert [u.model_dump() for u in first.values()] == [u.model_dump() for u in second.values()]


def test_group_does_not_mutate_inputs(make_record):
    """Test that input records are untouched by grouping."""
    light_bath = [make_record(1, 1, Modality.LIGHT_BATH)]
    rod = [make_record(2, 1, Modality.ROD)]
    before = [r.model_dump() for r in light_bath + rod]

    group_patients(light_bath, rod)

    assert [r.model_dump() for r in light_bath + rod] == before


ALL_MODALITIES = [Modality.LIGHT_BATH, Modality.ROD, Modality.SPIRITUAL]


@pytest.mark.parametrize(
    "types",
    [list(c) for n in range(0, 4) for c in combinations(ALL_MODALITIES, n)],
)
def test_combined_type_classification(types):
    """Test combined iff light bath and rod are both present; spiritual is ignored."""
    result = get_combined_type(types)

    if Modality.LIGHT_BATH in types and Modality.ROD in types:
        assert result == CombinedType.COMBINED
    elif Modality.ROD in types:
        assert result == CombinedType.ROD
    else:
        assert result == CombinedType.LIGHT_BATH


def test_combined_label_empty():
    """Test label for no groupable treatment."""
    assert get_combined_label([Modality.SPIRITUAL]) == ""


def test_group_day_keeps_spiritual_separate(make_record):
    """Test board grouping per status column with spiritual untouched."""
    day = date(2024, 1, 15)
    day_set = DayAttendanceSet.from_records(day, [
        make_record(1, 1, Modality.SPIRITUAL),
        make_record(2, 1, Modality.LIGHT_BATH),
        make_record(3, 1, Modality.ROD),
        make_record(4, 2, Modality.ROD, status=AttendanceStatus.CHECKED_IN),
    ])

    board = group_day(day_set)

    assert [r.attendance_id for r in board.spiritual.scheduled] == [1]
    assert len(board.grouped.scheduled) == 1
    assert board.grouped.scheduled[0].combined_type == CombinedType.COMBINED
    assert board.grouped.checkedIn[0].patient_id == 2
    assert board.grouped.onGoing == []
