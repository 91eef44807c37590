"""
bootstrap/develop.py - Development launcher

Runs a kernel module from a project directory without installing it:

    python -m kernelhost.bootstrap.develop --project DIR MODULE [ARGS...]

DIR (and DIR/src, when present) is put first on sys.path, so the module is
imported from the working tree on every launch.
"""

from __future__ import annotations
from typing import List
import argparse
import os
import runpy
import sys


def project_paths(project: str) -> List[str]:
    """Import roots of a project directory, flat layout first."""
    paths = [project]
    src = os.path.join(project, "src")
    if os.path.isdir(src):
        paths.append(src)
    return paths


def main(argv: list = None) -> None:
    parser = argparse.ArgumentParser(
        prog="python -m kernelhost.bootstrap.develop",
        description="Run a kernel module from a project directory.",
    )
    parser.add_argument("--project", required=True, help="Project directory")
    parser.add_argument("module", help="Module to run as __main__")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="Arguments for the module")

    parsed = parser.parse_args(argv)

    project = os.path.abspath(parsed.project)
    if not os.path.isdir(project):
        parser.error(
            f"project directory {project} no longer exists; "
            "reinstall the kernel spec"
        )

    for path in reversed(project_paths(project)):
        sys.path.insert(0, path)

    sys.argv = [parsed.module] + parsed.args
    runpy.run_module(parsed.module, run_name="__main__", alter_sys=True)


if __name__ == "__main__":
    main()
