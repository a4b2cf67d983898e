"""Pytest configuration and fixtures for IPEDSR tests."""

import pytest
import duckdb

from ipedsr.config import get_default_registry
from ipedsr.database import Catalog
from ipedsr.surveys import SurveyQuery


@pytest.fixture
def test_db():
    """Create in-memory DuckDB with a few survey years."""
    conn = duckdb.connect(":memory:")

    # Salaries: SAEQ9AT first appears in 2020
    conn.execute("""
        CREATE TABLE sal2015_is (
            UNITID INTEGER,
            ARANK INTEGER,
            SAINSTT INTEGER
        )
    """)
    conn.execute("""
        INSERT INTO sal2015_is VALUES
        (100654, 1, 120),
        (100654, 2, 95),
        (100663, 1, 410)
    """)

    conn.execute("""
        CREATE TABLE sal2020_is (
            UNITID INTEGER,
            ARANK INTEGER,
            SAINSTT INTEGER,
            SAEQ9AT BIGINT
        )
    """)
    conn.execute("""
        INSERT INTO sal2020_is VALUES
        (100654, 1, 118, 10250000),
        (100663, 1, 402, 40110000)
    """)

    # Directory
    conn.execute("""
        CREATE TABLE hd2022 (
            UNITID INTEGER,
            INSTNM VARCHAR,
            STABBR VARCHAR,
            CONTROL INTEGER
        )
    """)
    conn.execute("""
        INSERT INTO hd2022 VALUES
        (100654, 'Alabama A & M University', 'AL', 1),
        (218070, 'Furman University', 'SC', 2)
    """)

    # Data dictionary for 2022
    conn.execute("""
        CREATE TABLE vartable22 (
            TableName VARCHAR,
            varName VARCHAR,
            varTitle VARCHAR,
            longDescription VARCHAR
        )
    """)
    conn.execute("""
        INSERT INTO vartable22 VALUES
        ('HD2022', 'UNITID', 'Unique identification number', 'Unique ID of the institution'),
        ('HD2022', 'INSTNM', 'Institution name', 'Name of the institution'),
        ('HD2022', 'CONTROL', 'Control of institution', 'Public or private'),
        ('IC2022', 'ADMCON1', 'Secondary school GPA', 'Admission consideration')
    """)

    conn.execute("""
        CREATE TABLE valuesets22 (
            TableName VARCHAR,
            varName VARCHAR,
            Codevalue VARCHAR,
            valueLabel VARCHAR
        )
    """)
    conn.execute("""
        INSERT INTO valuesets22 VALUES
        ('HD2022', 'CONTROL', '1', 'Public'),
        ('HD2022', 'CONTROL', '2', 'Private not-for-profit'),
        ('HD2022', 'STABBR', 'SC', 'South Carolina'),
        ('IC2022', 'ADMCON1', '1', 'Required')
    """)

    yield conn
    conn.close()


@pytest.fixture
def catalog(test_db):
    """Catalog over the test database."""
    return Catalog(test_db)


@pytest.fixture
def registry():
    """Packaged survey registry."""
    return get_default_registry()


@pytest.fixture
def surveys(catalog, registry):
    """Survey query facade over the test database."""
    return SurveyQuery(catalog, registry)
