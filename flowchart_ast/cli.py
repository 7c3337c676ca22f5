#!/usr/bin/env python3
import argparse
import logging
import sys

from pydantic import ValidationError

from .config import FlowConfig, OutputSink
from .errors import FlowchartError
from .pipeline import run


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="flowchart-ast", description="Render a Python function's control flow as a Mermaid flowchart")
    p.add_argument("path", nargs="?", default=".", help="Source file or directory to search (default: .)")
    p.add_argument("--start", default="main", help="Function to analyze; Class.method disambiguates (default: main)")
    p.add_argument("--out", default="flow.md", help="Markdown file to write, or - for stdout (default: flow.md)")
    p.add_argument("-v", "--verbose", action="store_true", help="Log pipeline details")
    p.add_argument("--serve", action="store_true", help="Run the HTTP preview service instead")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8000)
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if args.serve:
        import uvicorn
        uvicorn.run("flowchart_ast.app:app", host=args.host, port=args.port)
        return 0

    try:
        config = FlowConfig(start=args.start, out=args.out, root=args.path)
    except ValidationError as e:
        print(f"Error: invalid arguments: {e}", file=sys.stderr)
        return 1

    try:
        run(config)
    except FlowchartError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code

    if config.sink is OutputSink.FILE:
        print(f"Successfully generated {config.out} for function {config.start}()")
    return 0


if __name__ == "__main__":
    sys.exit(main())
