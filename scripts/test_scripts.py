import subprocess
import sys

__BASE_CMD = [
    sys.executable,
    "-m",
    "pytest",
]
__UNIT_TESTS = "./tests/unit/"


def __run_process(cmd: list[str]) -> None:
    """Run a process with additional arguments."""
    # sys.argv[0] is the script name, sys.argv[1] the target
    extra_args = sys.argv[2:]

    try:
        subprocess.check_call(cmd + extra_args)
    except subprocess.CalledProcessError as e:
        sys.exit(e.returncode)


def coverage() -> None:
    """Run unit tests with coverage report."""
    cmd = [
        *__BASE_CMD,
        "--cov=release_reconciler",
        "--cov-report=term-missing",
        __UNIT_TESTS,
    ]

    __run_process(cmd)


def unit() -> None:
    """Run unit tests."""
    cmd = [
        *__BASE_CMD,
        __UNIT_TESTS,
    ]

    __run_process(cmd)


TARGETS = {"coverage": coverage, "unit": unit}


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else "unit"
    if target not in TARGETS:
        sys.exit(f"unknown target {target!r}, expected one of: {', '.join(TARGETS)}")
    TARGETS[target]()
