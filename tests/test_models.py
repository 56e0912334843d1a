"""Tests for the data model: validity, ordering, regions and status transitions."""

import pytest
from pydantic import ValidationError

from dashtrack.errors import InvalidStatusTransition
from dashtrack.models import (
    CUSTOM_GPS_REGION,
    FULL_FRAME,
    Coordinate,
    ExtractionMethod,
    ExtractionStatus,
    GPSPoint,
    OCRRegion,
    Trajectory,
    VideoItem,
)

from .conftest import invalid, trajectory, valid


class TestGPSPoint:
    def test_valid_point(self):
        point = GPSPoint.from_values(3, 37.7749, -122.4194)
        assert point.is_valid
        assert point.latitude == 37.7749
        assert point.longitude == -122.4194
        assert point.extraction_method == ExtractionMethod.OCR

    def test_missing_coordinate_is_invalid(self):
        assert not GPSPoint(frame_number=0).is_valid
        assert not GPSPoint.from_values(0, 10.0, None).is_valid
        assert GPSPoint.from_values(0, None, 10.0).coordinate is None

    def test_out_of_range_is_invalid(self):
        point = GPSPoint(frame_number=0, coordinate=Coordinate(latitude=95.0, longitude=0.0))
        assert point.coordinate is not None
        assert not point.is_valid

    def test_validity_is_not_settable(self):
        point = GPSPoint.from_values(0, 10.0, 10.0)
        with pytest.raises((AttributeError, ValidationError, TypeError)):
            point.is_valid = False

    def test_negative_frame_number_rejected(self):
        with pytest.raises(ValidationError):
            GPSPoint(frame_number=-1)

    def test_interpolated_uses_frame_fraction(self):
        start = valid(0, 0.0, 10.0)
        end = valid(4, 4.0, 30.0)
        point = GPSPoint.interpolated(1, start, end)
        assert point.latitude == pytest.approx(1.0)
        assert point.longitude == pytest.approx(15.0)
        assert point.extraction_method == ExtractionMethod.INTERPOLATION

    def test_interpolated_without_anchor_coordinates(self):
        point = GPSPoint.interpolated(1, invalid(0), valid(2, 1.0, 1.0))
        assert not point.is_valid
        assert point.extraction_method == ExtractionMethod.INTERPOLATION


class TestTrajectory:
    def test_ordered_frames_accepted(self):
        traj = trajectory(valid(0, 1.0, 1.0), invalid(1), valid(5, 2.0, 2.0))
        assert len(traj) == 3
        assert traj.frame_numbers == [0, 1, 5]
        assert traj.valid_count == 2
        assert traj.has_valid_points

    def test_duplicate_frames_rejected(self):
        with pytest.raises(ValidationError):
            trajectory(invalid(1), invalid(1))

    def test_decreasing_frames_rejected(self):
        with pytest.raises(ValidationError):
            trajectory(invalid(2), invalid(1))

    def test_iteration_yields_points(self):
        traj = trajectory(invalid(0), invalid(1))
        assert [p.frame_number for p in traj] == [0, 1]

    def test_empty(self):
        traj = Trajectory()
        assert len(traj) == 0
        assert not traj.has_valid_points


class TestOCRRegion:
    def test_presets(self):
        assert FULL_FRAME == OCRRegion(x=0, y=0, width=1, height=1)
        assert OCRRegion.from_preset("custom_gps") == CUSTOM_GPS_REGION
        assert CUSTOM_GPS_REGION.y == pytest.approx(1030 / 1080)

    def test_unknown_preset(self):
        with pytest.raises(ValueError):
            OCRRegion.from_preset("middle")

    def test_out_of_unit_range_rejected(self):
        with pytest.raises(ValidationError):
            OCRRegion(x=1.5, y=0, width=0.1, height=0.1)


class TestVideoItem:
    def test_defaults(self):
        item = VideoItem(source="/videos/drive 1.mp4")
        assert item.filename == "drive 1.mp4"
        assert item.status == ExtractionStatus.PENDING
        assert item.total_frames == 0
        assert not item.has_gps_data

    def test_completed_with_valid_points(self):
        item = VideoItem(source="a.mp4")
        item.start_extraction()
        assert item.status == ExtractionStatus.EXTRACTING
        item.complete(trajectory(invalid(0), valid(1, 5.0, 5.0)))
        assert item.status == ExtractionStatus.COMPLETED
        assert item.total_frames == 2

    def test_failed_without_valid_points(self):
        item = VideoItem(source="a.mp4")
        item.start_extraction()
        item.complete(trajectory(invalid(0), invalid(1)))
        assert item.status == ExtractionStatus.FAILED
        assert item.total_frames == 2

    def test_error_discards_trajectory(self):
        item = VideoItem(source="a.mp4", trajectory=trajectory(valid(0, 1.0, 1.0)))
        item.start_extraction()
        item.fail_with_error("unreadable")
        assert item.status == ExtractionStatus.ERROR
        assert len(item.trajectory) == 0
        assert item.error_message == "unreadable"

    def test_cannot_restart(self):
        item = VideoItem(source="a.mp4")
        item.start_extraction()
        item.complete(Trajectory())
        with pytest.raises(InvalidStatusTransition):
            item.start_extraction()

    def test_cannot_complete_without_starting(self):
        item = VideoItem(source="a.mp4")
        with pytest.raises(InvalidStatusTransition):
            item.complete(Trajectory())
