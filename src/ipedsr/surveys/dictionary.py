"""IPEDS data dictionary lookups.

Each collection year ships a vartable<YY> (variable titles) and a
valuesets<YY> (code labels) table. Rows are keyed by the survey table they
describe in a TableName column.
"""

from typing import Any, Optional

import pandas as pd

from ipedsr.config.logging_config import get_logger
from ipedsr.database.catalog import Catalog
from ipedsr.database.projection import quote_identifier
from ipedsr.exceptions import TableNotFoundError
from .years import extract_year

logger = get_logger("dictionary")


def dictionary_table_name(prefix: str, table_name: str) -> str:
    """
    Name of the dictionary table covering a survey table.

    Args:
        prefix: 'vartable' or 'valuesets'
        table_name: Survey table, e.g. 'hd2022'

    Returns:
        e.g. 'vartable22'

    Raises:
        TableNotFoundError: If the survey table name carries no year
    """
    year = extract_year(table_name)
    if year is None:
        raise TableNotFoundError(
            prefix, f"Cannot determine dictionary year for table '{table_name}'"
        )
    return f"{prefix}{year % 100:02d}"


def _lookup(catalog: Catalog, prefix: str, table_name: str, columns: list) -> pd.DataFrame:
    source = dictionary_table_name(prefix, table_name)
    if not catalog.table_exists(source):
        raise TableNotFoundError(source)

    select_list = ", ".join(quote_identifier(c) for c in columns)
    # Dictionary rows name tables in upper case (HD2022); stored tables are lower case
    sql = (
        f"SELECT {select_list} FROM {quote_identifier(source)} "
        f"WHERE upper(CAST({quote_identifier('TableName')} AS VARCHAR)) = upper(?)"
    )
    df = catalog.fetch_df(sql, [table_name], tables=[source])
    logger.debug(f"{source}: {len(df)} rows for {table_name}")
    return df


def get_variables(catalog: Catalog, table_name: str, verbose: bool = False) -> pd.DataFrame:
    """
    Get variable names and titles for a survey table.

    Args:
        catalog: Catalog to read from
        table_name: Survey table, e.g. 'hd2022'
        verbose: Include the long descriptions

    Returns:
        DataFrame with varName, varTitle (and longDescription)

    Raises:
        TableNotFoundError: If the matching vartable does not exist
    """
    columns = ["varName", "varTitle"]
    if verbose:
        columns.append("longDescription")
    return _lookup(catalog, "vartable", table_name, columns)


def get_valueset(catalog: Catalog, table_name: str) -> pd.DataFrame:
    """
    Get code labels for a survey table (e.g. STABBR 'SC' -> 'South Carolina').

    Args:
        catalog: Catalog to read from
        table_name: Survey table, e.g. 'hd2022'

    Returns:
        DataFrame with varName, Codevalue, valueLabel

    Raises:
        TableNotFoundError: If the matching valuesets table does not exist
    """
    return _lookup(catalog, "valuesets", table_name, ["varName", "Codevalue", "valueLabel"])


def _code_str(value: Any) -> Optional[str]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def decode_values(df: pd.DataFrame, valueset: pd.DataFrame) -> pd.DataFrame:
    """
    Replace coded values with their labels.

    Only columns named in the valueset are touched. Codes without a label
    become missing.

    Args:
        df: Survey data
        valueset: Output of get_valueset()

    Returns:
        Copy of df with labels in place of codes
    """
    result = df.copy()
    for var_name, lookups in valueset.groupby("varName", sort=False):
        if var_name not in result.columns:
            continue
        labels = dict(zip(lookups["Codevalue"].map(_code_str), lookups["valueLabel"]))
        result[var_name] = result[var_name].map(lambda v: labels.get(_code_str(v)))
    return result
