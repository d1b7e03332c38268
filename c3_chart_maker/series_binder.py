# c3_chart_maker/series_binder.py
import logging
from collections.abc import Mapping

import pandas as pd

from c3_chart_maker.data_processor import coerce_numeric, get_column, to_records
from c3_chart_maker.errors import InvalidChartDefinitionError

# The independent-axis series keeps its original values (dates, categories...)
X_SERIES = "x"


def bind_series(chart: dict, table: pd.DataFrame, coerce: bool = False) -> dict:
    """
    Fills the chart's data section from the table.

    With a ``series`` mapping, each series becomes one C3 column headed by its
    name, in declaration order. Without one, the whole table is passed as
    ``data.json`` row objects. When ``coerce`` is set (the table came from
    delimited text) every non-x series column is converted to numbers in place.
    """
    data = chart.setdefault("data", {})
    series = chart.get("series")

    if series is None:
        if "columns" in data:
            logging.debug("Dropping data.columns, the chart has no series to bind.")
            del data["columns"]
        data["json"] = to_records(table)
        logging.info(f"Bound {len(data['json'])} rows as data.json.")
        return chart

    if not isinstance(series, Mapping):
        raise InvalidChartDefinitionError(
            f"Expected chart 'series' to map series names to columns, got {type(series).__name__}."
        )

    if "json" in data:
        logging.debug("Dropping data.json, the chart binds series as columns.")
        del data["json"]
    columns = data.setdefault("columns", [])

    for series_name, column_name in series.items():
        if column_name not in table.columns:
            raise InvalidChartDefinitionError(
                f"Series '{series_name}' refers to column '{column_name}', "
                f"which is not in the data (columns: {list(table.columns)})."
            )
        if coerce and series_name != X_SERIES:
            coerce_numeric(table, column_name)
        columns.append([series_name] + get_column(table, column_name))

    logging.info(f"Bound {len(series)} series as data.columns.")
    return chart
