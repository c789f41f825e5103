"""
Tests for end-of-day closability and the day summary
"""
from datetime import date, datetime
from app.attendances.schemas import AttendanceStatus, DayAttendanceSet, Modality
from app.attendances.end_of_day import (
    check_end_of_day_status,
    get_completed_attendances,
    get_incomplete_attendances,
    get_scheduled_absences,
    summarize_day,
)

DAY = date(2024, 1, 15)
NOW = datetime(2024, 1, 15, 18, 0)


def test_only_scheduled_spiritual_is_absence(make_record):
    """Test a day with one scheduled spiritual record asks for absence confirmation."""
    record = make_record(1, 1, Modality.SPIRITUAL)
    result = check_end_of_day_status(DayAttendanceSet.from_records(DAY, [record]))

    assert result.type == "scheduled_absences"
    assert result.scheduled_absences == [record]
    assert result.incomplete_attendances == []


def test_on_going_without_scheduled_is_incomplete(make_record):
    """Test a visit still in progress blocks closing."""
    record = make_record(1, 1, Modality.ROD, status=AttendanceStatus.ON_GOING)
    result = check_end_of_day_status(DayAttendanceSet.from_records(DAY, [record]))

    assert result.type == "incomplete"
    assert result.incomplete_attendances == [record]


def test_empty_day_is_completed():
    """Test a day without records can be closed."""
    result = check_end_of_day_status(DayAttendanceSet(date=DAY))

    assert result.type == "completed"
    assert result.incomplete_attendances == []
    assert result.scheduled_absences == []


def test_missing_day_is_incomplete():
    """Test that no data at all is reported as incomplete with nothing listed."""
    result = check_end_of_day_status(None)

    assert result.type == "incomplete"
    assert result.incomplete_attendances == []
    assert get_scheduled_absences(None) == []
    assert get_incomplete_attendances(None) == []
    assert get_completed_attendances(None) == []


def test_all_completed_is_completed(make_record):
    """Test a fully attended day."""
    day_set = DayAttendanceSet.from_records(DAY, [
        make_record(1, 1, Modality.SPIRITUAL, status=AttendanceStatus.COMPLETED),
        make_record(2, 1, Modality.LIGHT_BATH, status=AttendanceStatus.COMPLETED),
    ])

    assert check_end_of_day_status(day_set).type == "completed"
    assert [r.attendance_id for r in get_completed_attendances(day_set)] == [1, 2]


def test_scheduled_takes_precedence_over_checked_in(make_record):
    """Test that absences are reported before unfinished visits."""
    day_set = DayAttendanceSet.from_records(DAY, [
        make_record(1, 1, Modality.SPIRITUAL, status=AttendanceStatus.CHECKED_IN),
        make_record(2, 2, Modality.LIGHT_BATH),
    ])

    result = check_end_of_day_status(day_set)

    assert result.type == "scheduled_absences"
    assert [r.attendance_id for r in result.scheduled_absences] == [2]


def test_incomplete_lists_every_modality(make_record):
    """Test incomplete visits are collected across modalities in board order."""
    day_set = DayAttendanceSet.from_records(DAY, [
        make_record(1, 1, Modality.ROD, status=AttendanceStatus.CHECKED_IN),
        make_record(2, 2, Modality.SPIRITUAL, status=AttendanceStatus.ON_GOING),
        make_record(3, 3, Modality.LIGHT_BATH, status=AttendanceStatus.COMPLETED),
    ])

    result = check_end_of_day_status(day_set)

    assert result.type == "incomplete"
    assert [r.attendance_id for r in result.incomplete_attendances] == [2, 1]


def test_status_check_is_idempotent(make_record):
    """Test repeated classification of the same snapshot gives the same answer."""
    day_set = DayAttendanceSet.from_records(DAY, [
        make_record(1, 1), make_record(2, 2, status=AttendanceStatus.ON_GOING),
    ])

    assert check_end_of_day_status(day_set) == check_end_of_day_status(day_set)


def test_summary_counts_distinct_patients(make_record):
    """Test the per-patient head count of a day."""
    day_set = DayAttendanceSet.from_records(DAY, [
        # Patient 1 finished both treatments
        make_record(1, 1, Modality.LIGHT_BATH, status=AttendanceStatus.COMPLETED),
        make_record(2, 1, Modality.ROD, status=AttendanceStatus.COMPLETED),
        # Patient 2 never came
        make_record(3, 2, Modality.SPIRITUAL),
        make_record(4, 2, Modality.ROD),
        # Patient 3 came for one of two
        make_record(5, 3, Modality.SPIRITUAL, status=AttendanceStatus.COMPLETED),
        make_record(6, 3, Modality.ROD),
    ])

    summary = summarize_day(day_set, now=NOW)

    assert summary.total_patients == 3
    assert summary.completed_patients == 1
    assert summary.missed_patients == 1
    assert summary.completion_time == NOW


def test_summary_of_missing_day(make_record):
    summary = summarize_day(None, now=NOW)

    assert summary.total_patients == 0
    assert summary.completed_patients == 0
    assert summary.missed_patients == 0


def test_summary_counts_unsaved_records_separately(make_record):
    """Test records without patient or attendance id are not merged into one patient."""
    day_set = DayAttendanceSet.from_records(DAY, [
        make_record(None, None, Modality.SPIRITUAL),
        make_record(None, None, Modality.ROD, status=AttendanceStatus.COMPLETED),
        make_record(None, None, Modality.ROD),
    ])

    summary = summarize_day(day_set, now=NOW)

    assert summary.total_patients == 3
    assert summary.completed_patients == 1
    assert summary.missed_patients == 2
