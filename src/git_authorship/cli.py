from __future__ import annotations

import sys

from . import analysis_cli


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if "-h" in argv or "--help" in argv:
        p = analysis_cli._build_parser()
        p.print_help()
        return 0
    return analysis_cli.main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
