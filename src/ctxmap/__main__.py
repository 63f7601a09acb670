"""Entry point for `python -m ctxmap`."""

import sys


def main():
    from ctxmap.cli import run
    sys.exit(run())


if __name__ == "__main__":
    main()
