"""Serve the rod cutting demo API: python -m demo_api [port]"""
import sys

import uvicorn

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
USAGE = "usage: python -m demo_api [port]"


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    try:
        port = int(argv[0]) if argv else DEFAULT_PORT
    except ValueError:
        sys.exit(f"{USAGE}\ninvalid port: {argv[0]!r}")
    uvicorn.run("demo_api.api:app", host=DEFAULT_HOST, port=port)


if __name__ == "__main__":
    main()
