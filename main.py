# main.py
import argparse
import asyncio
import logging
import os
import sys

from c3_chart_maker import config
from c3_chart_maker.chart_maker import RenderOptions, render_chart
from c3_chart_maker.errors import ChartMakerError


def parse_chart_args(pairs):
    """Turns repeated KEY=VALUE arguments into the dict handed to chart generators."""
    chart_args = {}
    for pair in pairs or []:
        key, sep, value = pair.partition('=')
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Expected KEY=VALUE, got '{pair}'")
        chart_args[key] = value
    return chart_args


def build_parser():
    parser = argparse.ArgumentParser(
        description="Render a C3 chart from a CSV file to a cropped PNG image"
    )
    parser.add_argument("input_file", help="Path to the input CSV (or TSV) file")
    parser.add_argument("chart_file", help="Path to the chart definition (.json or .py)")
    parser.add_argument("output_file", help="Path of the PNG image to write")
    parser.add_argument("--css", dest="css_file_path", help="Stylesheet injected before rendering")
    parser.add_argument("--show", action="store_true", help="Show the browser window while rendering")
    parser.add_argument("--dump-chart", action="store_true", default=config.DUMP_CHART,
                        help="Print the resolved chart definition before rendering")
    parser.add_argument("--timeout", type=int, default=config.DEFAULT_WAIT_TIMEOUT_MS,
                        help=f"Milliseconds to wait for the chart to appear (default: {config.DEFAULT_WAIT_TIMEOUT_MS})")
    parser.add_argument("--delimiter", help="Field separator of the input file (default: from extension)")
    parser.add_argument("--arg", dest="chart_args", action="append", metavar="KEY=VALUE",
                        help="Argument passed to a .py chart generator (repeatable)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] [%(module)s] %(message)s",
    )

    try:
        chart_args = parse_chart_args(args.chart_args)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    # Check inputs before a browser is launched
    if not os.path.exists(args.input_file):
        logging.error(f"Input data file not found at '{args.input_file}'")
        return 1
    if not os.path.exists(args.chart_file):
        logging.error(f"Chart definition not found at '{args.chart_file}'")
        return 1
    output_dir = os.path.dirname(os.path.abspath(args.output_file))
    if not os.path.isdir(output_dir):
        logging.error(f"Output directory does not exist: '{output_dir}'")
        return 1

    options = RenderOptions(
        show=args.show,
        css_file_path=args.css_file_path,
        dump_chart=args.dump_chart,
        wait_timeout_ms=args.timeout,
        chart_args=chart_args,
        delimiter=args.delimiter,
    )

    try:
        output_path = asyncio.run(
            render_chart(args.input_file, args.chart_file, args.output_file, options)
        )
    except ChartMakerError as e:
        logging.error("--- CHART RENDERING FAILED ---")
        logging.error(f"{type(e).__name__}: {e}")
        return 1
    except Exception as e:
        logging.critical(f"A top-level error occurred: {e}")
        return 1

    logging.info(f"Chart saved to: {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
