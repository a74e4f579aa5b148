#!/usr/bin/env python3
"""Run repository checks: ruff, pyright, and optional tests.

Exits non-zero on the first failing step so CI can observe status.
"""

from __future__ import annotations

import argparse
import subprocess
import sys


def run(cmd: list[str]) -> int:
    print("=>", " ".join(cmd))
    res = subprocess.run(cmd, check=False)
    return res.returncode


def main() -> int:
    parser = argparse.ArgumentParser(description="Lint, type-check and test sizemic")
    parser.add_argument("--no-tests", action="store_true", help="Skip running pytest")
    parser.add_argument("--fix", action="store_true", help="Let ruff apply safe fixes")
    args = parser.parse_args()

    ruff_cmd = [sys.executable, "-m", "ruff", "check", "sizemic", "tests"]
    if args.fix:
        ruff_cmd.append("--fix")
    rc = run(ruff_cmd)
    if rc != 0:
        print("ruff failed")
        return rc

    rc = run([sys.executable, "-m", "pyright"])
    if rc != 0:
        print("pyright failed")
        return rc

    if not args.no_tests:
        rc = run([sys.executable, "-m", "pytest", "-q"])
        if rc != 0:
            print("pytest failed")
            return rc

    print("All checks passed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
