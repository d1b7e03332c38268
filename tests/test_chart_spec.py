"""Tests for resolving chart definitions from files, generators and dicts."""

import json

import pandas as pd
import pytest

from c3_chart_maker.chart_spec import (
    Generator,
    InMemoryObject,
    StaticJson,
    chart_spec_source,
    resolve_chart_spec,
)
from c3_chart_maker.errors import (
    ChartGeneratorError,
    ConfigParseError,
    InvalidChartDefinitionError,
    UnsupportedChartFormatError,
)

GENERATOR_SCRIPT = '''
def build_chart(table, args):
    return {
        "series": {"x": "x", "y": "y"},
        "axis": {"y": {"label": args.get("label", "none")}},
        "rows": len(table),
    }
'''


@pytest.fixture
def table():
    return pd.DataFrame({"x": [1, 2], "y": [2, 3]})


class TestChartSpecSource:
    def test_dispatches_on_extension(self, tmp_path):
        assert isinstance(chart_spec_source(tmp_path / "chart.json"), StaticJson)
        assert isinstance(chart_spec_source(str(tmp_path / "chart.PY")), Generator)

    def test_callable_is_a_generator(self):
        source = chart_spec_source(lambda table, args: {})

        assert isinstance(source, Generator)

    def test_dict_is_in_memory(self):
        assert isinstance(chart_spec_source({"data": {}}), InMemoryObject)

    def test_unknown_extension(self):
        with pytest.raises(UnsupportedChartFormatError) as excinfo:
            chart_spec_source("charts/line.yaml")

        assert "charts/line.yaml" in str(excinfo.value)
        assert excinfo.value.path == "charts/line.yaml"


class TestStaticJson:
    def test_loads_and_normalizes(self, tmp_path, table):
        path = tmp_path / "chart.json"
        path.write_text(json.dumps({"bindto": "#elsewhere", "axis": {"x": {"type": "category"}}}))

        chart = resolve_chart_spec(path, table)

        assert chart == {
            "bindto": "#view",
            "axis": {"x": {"type": "category"}},
            "data": {},
        }

    def test_invalid_json(self, tmp_path, table):
        path = tmp_path / "chart.json"
        path.write_text("{ not json")

        with pytest.raises(ConfigParseError):
            resolve_chart_spec(path, table)

    def test_missing_file(self, tmp_path, table):
        with pytest.raises(ConfigParseError):
            resolve_chart_spec(tmp_path / "missing.json", table)

    def test_top_level_must_be_object(self, tmp_path, table):
        path = tmp_path / "chart.json"
        path.write_text("[1, 2, 3]")

        with pytest.raises(InvalidChartDefinitionError):
            resolve_chart_spec(path, table)


class TestGenerator:
    def test_script_receives_table_and_args(self, tmp_path, table):
        path = tmp_path / "make_chart.py"
        path.write_text(GENERATOR_SCRIPT)

        chart = resolve_chart_spec(path, table, {"label": "Sales"})

        assert chart["rows"] == 2
        assert chart["axis"]["y"]["label"] == "Sales"
        assert chart["bindto"] == "#view"
        assert chart["data"] == {}

    def test_script_without_build_chart(self, tmp_path, table):
        path = tmp_path / "empty.py"
        path.write_text("VALUE = 1\n")

        with pytest.raises(ChartGeneratorError, match="build_chart"):
            resolve_chart_spec(path, table)

    def test_script_that_fails_to_import(self, tmp_path, table):
        path = tmp_path / "broken.py"
        path.write_text("def build_chart(:\n")

        with pytest.raises(ChartGeneratorError):
            resolve_chart_spec(path, table)

    def test_generator_exception_is_wrapped(self, table):
        def build_chart(table, args):
            raise ValueError("no such column")

        with pytest.raises(ChartGeneratorError, match="no such column") as excinfo:
            resolve_chart_spec(build_chart, table)

        assert isinstance(excinfo.value.__cause__, ValueError)

    def test_generator_must_return_object(self, table):
        with pytest.raises(InvalidChartDefinitionError):
            resolve_chart_spec(lambda table, args: "chart", table)

    def test_args_default_to_empty_dict(self, table):
        received = {}

        def build_chart(table, args):
            received["args"] = args
            return {}

        resolve_chart_spec(build_chart, table)

        assert received["args"] == {}


class TestInMemoryObject:
    def test_caller_dict_is_not_mutated(self, table):
        spec = {"series": {"x": "x"}, "bindto": "#mine"}

        chart = resolve_chart_spec(spec, table)

        assert chart["bindto"] == "#view"
        assert chart["data"] == {}
        assert spec == {"series": {"x": "x"}, "bindto": "#mine"}

    @pytest.mark.parametrize("value", [None, 3, 2.5, True, ["a"]])
    def test_rejects_non_objects(self, value, table):
        with pytest.raises(InvalidChartDefinitionError):
            resolve_chart_spec(value, table)

    def test_null_data_becomes_empty_object(self, table):
        chart = resolve_chart_spec({"data": None}, table)

        assert chart["data"] == {}

    def test_data_must_be_object(self, table):
        with pytest.raises(InvalidChartDefinitionError):
            resolve_chart_spec({"data": [1, 2]}, table)
