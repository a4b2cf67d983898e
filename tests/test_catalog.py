"""Tests for catalog access."""

import pytest

from ipedsr.database import (
    Catalog,
    ColumnRef,
    IntegerLiteral,
    NullLiteral,
    ProjectedColumn,
    get_catalog,
    quote_identifier,
    render_select,
)
from ipedsr.exceptions import CatalogError, TableNotFoundError


class TestCatalog:
    """Tests for Catalog metadata."""

    def test_list_table_names(self, catalog):
        assert catalog.list_table_names() == [
            "hd2022", "sal2015_is", "sal2020_is", "valuesets22", "vartable22"
        ]

    def test_names_returned_as_stored(self, catalog, test_db):
        test_db.execute('CREATE TABLE "HD2023" (UNITID INTEGER)')

        assert "HD2023" in catalog.list_table_names()
        assert catalog.table_exists("HD2023")
        assert not catalog.table_exists("hd2023")

    def test_get_table_schema(self, catalog):
        schema = catalog.get_table_schema("sal2020_is")

        assert schema.get_column_names() == ["UNITID", "ARANK", "SAINSTT", "SAEQ9AT"]
        assert schema.get_column_types()["SAEQ9AT"] == "BIGINT"
        assert schema.has_column("ARANK")

    def test_has_column_ignores_case(self, catalog):
        """Test column lookup the way DuckDB resolves identifiers."""
        schema = catalog.get_table_schema("sal2020_is")

        assert schema.has_column("arank")
        assert schema.get_stored_name("saeq9at") == "SAEQ9AT"
        assert schema.get_stored_name("RANK") is None
        assert not schema.has_column("rank")

    def test_missing_table(self, catalog):
        with pytest.raises(TableNotFoundError) as exc_info:
            catalog.get_column_names("sal1999_is")

        assert exc_info.value.table_name == "sal1999_is"

    def test_row_count(self, catalog):
        assert catalog.row_count("sal2015_is") == 3

        with pytest.raises(TableNotFoundError):
            catalog.row_count("nope")

    def test_table_not_found_is_catalog_error(self, catalog):
        with pytest.raises(CatalogError):
            catalog.get_column_types("nope")

    def test_select_as_relation(self, catalog):
        projection = [
            ProjectedColumn("UNITID", ColumnRef("UNITID")),
            ProjectedColumn("SAEQ9AT", NullLiteral("BIGINT")),
            ProjectedColumn("YEAR", IntegerLiteral(2015)),
        ]

        df = catalog.select_as_relation("sal2015_is", projection).df()

        assert list(df.columns) == ["UNITID", "SAEQ9AT", "YEAR"]
        assert df["YEAR"].tolist() == [2015, 2015, 2015]

    def test_query_names_vanished_table(self, catalog):
        with pytest.raises(TableNotFoundError) as exc_info:
            catalog.query('SELECT * FROM "gone2020"', tables=["hd2022", "gone2020"])

        assert exc_info.value.table_name == "gone2020"

    def test_attached_database_ignored(self, catalog, test_db):
        """Test that tables of another attached database are not listed."""
        test_db.execute("ATTACH ':memory:' AS other")
        test_db.execute("CREATE TABLE other.main.sal1999_is (UNITID INTEGER)")
        test_db.execute("CREATE TABLE other.main.hd2022 (OTHER_ID INTEGER, EXTRA VARCHAR)")

        names = catalog.list_table_names()

        assert "sal1999_is" not in names
        assert names.count("hd2022") == 1
        assert catalog.get_column_names("hd2022") == ["UNITID", "INSTNM", "STABBR", "CONTROL"]
        assert not catalog.table_exists("sal1999_is")

    def test_get_catalog_default_schema(self, test_db):
        assert get_catalog(test_db).schema == "main"


class TestProjection:
    """Tests for projection rendering."""

    def test_quote_identifier(self):
        assert quote_identifier("sal2015_is") == '"sal2015_is"'
        assert quote_identifier('odd"name') == '"odd""name"'

    def test_null_literal(self):
        assert NullLiteral("DECIMAL(12,2)").to_sql() == "CAST(NULL AS DECIMAL(12,2))"
        assert NullLiteral(None).to_sql() == "NULL"
        assert NullLiteral("INT; DROP TABLE x").to_sql() == "NULL"

    def test_integer_literal(self):
        assert IntegerLiteral(2015).to_sql() == "2015"
        assert IntegerLiteral(None).to_sql() == "CAST(NULL AS INTEGER)"

    def test_render_select(self):
        sql = render_select("hd2022", [ProjectedColumn("YEAR", IntegerLiteral(2022))])

        assert sql == 'SELECT 2022 AS "YEAR" FROM "hd2022"'

    def test_render_select_empty(self):
        with pytest.raises(ValueError):
            render_select("hd2022", [])
