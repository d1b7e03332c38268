# Chart generator: called as build_chart(table, args) with the loaded DataFrame.
import pandas as pd


def build_chart(table, args):
    revenue = pd.to_numeric(table["revenue"], errors="coerce")
    costs = pd.to_numeric(table["costs"], errors="coerce")
    table["margin"] = revenue - costs

    return {
        "series": {
            "x": "month",
            "Margin": "margin",
        },
        "data": {
            "x": "x",
            "type": args.get("type", "bar"),
        },
        "axis": {
            "x": {"type": "category"},
        },
        "transition": {"duration": 0},
    }
