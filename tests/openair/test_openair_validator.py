"""Tests for OpenAir structural validation."""

from airspacekit.openair.validator import validate_openair_file


class TestValidateOpenAirFile:
    """Test errors and warnings reported for OpenAir files."""

    def test_valid_sample(self, sample_openair: str) -> None:
        """Test a well-formed file has no errors or warnings."""
        result = validate_openair_file(sample_openair)
        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []
        assert result.airspace_count == 2

    def test_empty_file(self) -> None:
        """Test empty input is invalid."""
        result = validate_openair_file("   \n")
        assert not result.is_valid
        assert "File is empty" in result.errors

    def test_not_openair(self) -> None:
        """Test arbitrary text is reported as the wrong format."""
        result = validate_openair_file("hello world\nthis is not airspace")
        assert not result.is_valid
        assert "No airspace definitions found (AC entries missing)" in result.errors
        assert "File does not appear to be in OpenAir format" in result.errors

    def test_missing_coordinates_warns(self) -> None:
        """Test airspaces without geometry lines produce warnings, not errors."""
        text = "AC D\nAN No Geometry\nAL SFC\nAH 2500\n*\nAC R\nAN Also None\n*"
        result = validate_openair_file(text)
        assert result.is_valid
        assert result.warnings == [
            "Airspace 1 has no coordinates",
            "Airspace 2 has no coordinates",
        ]

    def test_self_intersection_warns(self) -> None:
        """Test figure-eight boundaries are flagged."""
        text = (
            "AC R\nAN Bowtie\n"
            "DP 40:00:00 N 100:00:00 W\n"
            "DP 41:00:00 N 99:00:00 W\n"
            "DP 41:00:00 N 100:00:00 W\n"
            "DP 40:00:00 N 99:00:00 W\n*"
        )
        result = validate_openair_file(text)
        assert result.is_valid
        assert result.warnings == ["Airspace 'Bowtie' boundary intersects itself"]
