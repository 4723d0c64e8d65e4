"""
Quilt Designer command line.

Usage:
    quilt-designer                        # same as `serve`
    quilt-designer serve --port 3000 --log-level debug
    python -m quiltdesigner serve --host 0.0.0.0
"""

from __future__ import annotations

import argparse
import logging
import sys

LOG_LEVELS = ("debug", "info", "warning", "error")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="quilt-designer",
                                description="Lay out photo squares on a quilt surface")
    p.set_defaults(cmd="serve", host="127.0.0.1", port=8000, log_level="info")
    sub = p.add_subparsers(dest="cmd")

    sv = sub.add_parser("serve", help="Start the web server")
    sv.add_argument("--host", default="127.0.0.1", help="Host to bind")
    sv.add_argument("--port", type=int, default=8000, help="Port to bind")
    sv.add_argument("--log-level", choices=LOG_LEVELS, default="info",
                    help="Root logging level")

    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "serve":
        from quiltdesigner.web.server import main as serve
        serve(host=args.host, port=args.port)
        return 0

    return 1


if __name__ == "__main__":
    sys.exit(main())
