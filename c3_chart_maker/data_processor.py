# c3_chart_maker/data_processor.py
import io
import logging
import math
from pathlib import Path

import pandas as pd

from c3_chart_maker.errors import InvalidDefinitionError

TAB_SEPARATED_EXTENSIONS = ('.tsv', '.tab')


def infer_delimiter(file_path) -> str:
    """Guesses the field separator from the file extension."""
    if Path(file_path).suffix.lower() in TAB_SEPARATED_EXTENSIONS:
        return '\t'
    return ','


def load_table(file_path, delimiter: str = None) -> pd.DataFrame:
    """
    Loads a delimited text file into a DataFrame.

    Every cell is kept as text (empty cells stay empty strings) so that
    columns can be coerced explicitly later, the way the chart needs them.
    """
    delimiter = delimiter or infer_delimiter(file_path)
    logging.info(f"Loading table from {file_path}...")
    try:
        table = pd.read_csv(file_path, sep=delimiter, dtype=str, keep_default_na=False)
    except Exception as e:
        logging.error(f"Could not load delimited data from {file_path}: {e}")
        raise
    logging.info(f"Loaded {len(table)} rows, columns: {list(table.columns)}")
    return table


def parse_delimited_text(text: str, delimiter: str = ',') -> pd.DataFrame:
    """Parses delimited text held in memory, with the same typing rules as load_table."""
    return pd.read_csv(io.StringIO(text), sep=delimiter, dtype=str, keep_default_na=False)


def as_table(data) -> pd.DataFrame:
    """Accepts a DataFrame or a list of row dicts and returns a DataFrame."""
    if isinstance(data, pd.DataFrame):
        return data
    if isinstance(data, list) and all(isinstance(row, dict) for row in data):
        return pd.DataFrame.from_records(data)
    raise InvalidDefinitionError(
        "Expected the data source to be a path to a delimited text file, "
        f"a pandas DataFrame or a list of row dicts, got {type(data).__name__}."
    )


def coerce_numeric(table: pd.DataFrame, columns) -> pd.DataFrame:
    """
    Converts the named columns to numbers, in place.

    Values that do not parse, and infinities ("inf", or overflow such as
    "1e999"), become missing instead of failing the run.
    """
    if isinstance(columns, str):
        columns = [columns]
    for column in columns:
        original = table[column]
        converted = pd.to_numeric(original, errors='coerce')
        infinite = converted.isin([math.inf, -math.inf])
        if infinite.any():
            converted = converted.mask(infinite)
        unparsed = converted.isna() & original.notna() & (original.astype(str).str.strip() != '')
        if unparsed.any():
            logging.warning(
                f"{int(unparsed.sum())} value(s) in column '{column}' are not numeric "
                "and will be treated as missing."
            )
        table[column] = converted
    return table


def _with_none(values):
    # None is the only missing marker that survives JSON serialization as null
    return values.astype(object).where(values.notna(), None)


def get_column(table: pd.DataFrame, column: str) -> list:
    """Extracts a column as a list, with None in every missing slot."""
    return _with_none(table[column]).tolist()


def to_records(table: pd.DataFrame) -> list:
    """Materializes the table as a list of row dicts, with None for missing values."""
    return _with_none(table).to_dict(orient='records')
