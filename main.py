"""Run the Link Parity Checker API server."""

import argparse

import uvicorn

from app.logger import configure


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Link Parity Checker API server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", default="INFO", help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--log-file", default=None, help="Optional rotating log file")
    return parser.parse_args()


if __name__ == "__main__":
    args = parse_args()
    configure(level=args.log_level.upper(), log_file=args.log_file)
    uvicorn.run("app.main:app", host=args.host, port=args.port)
