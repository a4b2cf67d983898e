"""Tests for the command line interface."""

import duckdb
import pytest

from ipedsr.cli import main


@pytest.fixture
def db_file(tmp_path):
    """File database with two salaries years."""
    path = tmp_path / "ipeds.duckdb"
    conn = duckdb.connect(str(path))
    conn.execute("CREATE TABLE sal2015_is (UNITID INTEGER, SAINSTT INTEGER)")
    conn.execute("INSERT INTO sal2015_is VALUES (100654, 120), (100663, 410)")
    conn.execute("CREATE TABLE sal2020_is (UNITID INTEGER, SAINSTT INTEGER, SAEQ9AT BIGINT)")
    conn.execute("INSERT INTO sal2020_is VALUES (100654, 118, 10250000)")
    conn.close()
    return path


class TestRegistryCommands:
    """Tests for commands that need no database."""

    def test_surveys(self, capsys):
        assert main(["surveys"]) == 0

        out = capsys.readouterr().out
        assert "salaries" in out
        assert "admissions" in out

    def test_surveys_by_category(self, capsys):
        assert main(["surveys", "--category", "metadata"]) == 0

        out = capsys.readouterr().out
        assert "vartable" in out
        assert "salaries" not in out

    def test_info(self, capsys):
        assert main(["info", "salaries"]) == 0

        assert "Survey: salaries" in capsys.readouterr().out

    def test_unknown_survey(self):
        assert main(["info", "unknown_survey"]) == 2


class TestCatalogCommands:
    """Tests for commands that read the database."""

    def test_tables(self, db_file, capsys):
        assert main(["--db", str(db_file), "tables", "salaries"]) == 0

        out = capsys.readouterr().out
        assert "sal2015_is" in out
        assert "2 table(s)" in out

    def test_tables_year_range(self, db_file, capsys):
        assert main(["--db", str(db_file), "tables", "salaries", "--from", "2016"]) == 0

        out = capsys.readouterr().out
        assert "sal2020_is" in out
        assert "sal2015_is" not in out

    def test_consolidate_preview(self, db_file, capsys):
        assert main(["--db", str(db_file), "consolidate", "salaries", "--limit", "0"]) == 0

        out = capsys.readouterr().out
        assert "Rows:    3" in out

    def test_consolidate_materialize(self, db_file):
        args = ["--db", str(db_file), "consolidate", "salaries", "--materialize", "salaries_all"]
        assert main(args) == 0

        conn = duckdb.connect(str(db_file), read_only=True)
        try:
            assert conn.execute("SELECT COUNT(*) FROM salaries_all").fetchone()[0] == 3
        finally:
            conn.close()

    def test_coverage(self, db_file, capsys):
        assert main(["--db", str(db_file), "coverage"]) == 0

        assert "salaries" in capsys.readouterr().out

    def test_case_check(self, db_file, capsys):
        assert main(["--db", str(db_file), "case-check", "salaries"]) == 0

        conn = duckdb.connect(str(db_file))
        conn.execute('CREATE TABLE "SAL2018_IS" (UNITID INTEGER)')
        conn.close()

        assert main(["--db", str(db_file), "case-check", "salaries"]) == 1
        assert "SAL2018_IS" in capsys.readouterr().out

    def test_missing_database(self, tmp_path):
        assert main(["--db", str(tmp_path / "none.duckdb"), "tables", "salaries"]) == 2
