"""Tests for year extraction from table names."""

import pytest

from ipedsr.surveys.years import extract_year, pivot_two_digit_year, year_in_range


class TestExtractYear:
    """Tests for extract_year."""

    @pytest.mark.parametrize("name,year", [
        ("sal2015_is", 2015),
        ("hd2022", 2022),
        ("c2023_a", 2023),
        ("ef2010d", 2010),
        ("gr2019_pell_ssl", 2019),
    ])
    def test_four_digit_year(self, name, year):
        assert extract_year(name) == year

    @pytest.mark.parametrize("name,year", [
        ("ef0910", 2010),
        ("sfa1819_p1", 2019),
        ("sfa1920", 2020),
        ("f9900_f2", 2000),
        ("ic9899", 1999),
    ])
    def test_academic_year_range(self, name, year):
        """Test that ranges resolve to their second year through the pivot."""
        assert extract_year(name) == year

    @pytest.mark.parametrize("name,year", [
        ("valuesets23", 2023),
        ("vartable06", 2006),
        ("tables99", 1999),
        ("ef19a", 2019),
    ])
    def test_two_digit_year(self, name, year):
        assert extract_year(name) == year

    @pytest.mark.parametrize("name", ["ipeds_metadata", "tables_all", "x1"])
    def test_no_year(self, name):
        assert extract_year(name) is None

    def test_deterministic(self):
        assert extract_year("ef0910") == extract_year("ef0910")


class TestPivot:
    """Tests for the two-digit century pivot."""

    def test_pivot_boundary(self):
        assert pivot_two_digit_year(0) == 2000
        assert pivot_two_digit_year(50) == 2050
        assert pivot_two_digit_year(51) == 1951
        assert pivot_two_digit_year(99) == 1999

    def test_pivot_out_of_range(self):
        with pytest.raises(ValueError):
            pivot_two_digit_year(100)


class TestYearInRange:
    """Tests for year range filtering."""

    def test_unbounded_includes_undated(self):
        assert year_in_range(None)
        assert year_in_range(2015)

    def test_bounded_excludes_undated(self):
        assert not year_in_range(None, year_min=2000)
        assert not year_in_range(None, year_max=2030)

    def test_inclusive_bounds(self):
        assert year_in_range(2015, 2015, 2020)
        assert year_in_range(2020, 2015, 2020)
        assert not year_in_range(2014, 2015, 2020)
        assert not year_in_range(2021, 2015, 2020)
