"""
utils.py: module that serve general functionalities for use with the cluster
but not directly part of the provisioning flow.
"""
import re
import subprocess
import sys
from typing import List, Optional

def run(cmd, check=True, silent=False, input=None):
    """
    run: runs shell command
    """
    try:
        result = subprocess.run(
            cmd, capture_output=silent, text=True, check=check, input=input
        )
        return result
    except subprocess.CalledProcessError as e:
        if not silent:
            error(f"Command failed: {' '.join(cmd)}")
            print(e.stderr)
        raise


def output_lines(cmd, input=None) -> List[str]:
    """
    output_lines: runs command silently and returns its non-empty stdout lines.
    Raises CalledProcessError on non-zero exit.
    """
    result = run(cmd, check=True, silent=True, input=input)
    return [line for line in result.stdout.splitlines() if line.strip()]


def ensure_kubectl_available(kubectl: str = "kubectl"):
    """
    ensure_kubectl_available: ensures the kubectl client can be executed
    """
    try:
        result = run([kubectl, "version", "--client"], silent=True, check=False)
    except OSError:
        result = None
    if result is None or result.returncode != 0:
        fatal(f"'{kubectl}' not found or not working. Install kubectl and check your PATH.")
        sys.exit(1)

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

def strip_ansi(text: str) -> str:
    """
    strip_ansi: removes terminal colour codes, kubectl adds them on a tty
    """
    return _ANSI_RE.sub("", text)

def _color(code):
    """
    _color: returns color code that can be use inside terminal
    """
    return f"\033[{code}m"

RED = _color("31")
GREEN = _color("32")
YELLOW = _color("33")
BLUE = _color("34")
BOLD = _color("1")
RESET = _color("0")

def info(msg):
    """
    info: prints message with formatting for INFO
    """
    print(f"{BLUE}[INFO] {msg}{RESET}")

def success(msg):
    """
    success: prints message with formatting for SUCCEEDED event
    """
    print(f"{GREEN}[OK] {msg}{RESET}")

def warning(msg):
    """
    warning: prints message with formatting for WARNING
    """
    print(f"{YELLOW}[WARNING] {msg}{RESET}")

def error(msg):
    """
    error: prints message with formatting for FAILED/ERROR event
    """
    print(f"{RED}[ERROR] {msg}{RESET}")

def fatal(msg):
    """
    fatal: prints message with formatting for unrecoverable failure event
    """
    print(f"{RED}[FATAL] {msg}{RESET}")

def heading(msg):
    """
    heading: prints message with formatting for heading for more results
    """
    print(f"\n{BOLD}{msg}{RESET}")


class Status:
    """
    Status: brackets a long running step with a start line and an OK/ERROR line
    """

    def __init__(self):
        self.message: Optional[str] = None

    def start(self, msg: str):
        self.message = msg
        info(f"{msg} ...")

    def end(self, ok: bool):
        if self.message is None:
            return
        if ok:
            success(self.message)
        else:
            error(self.message)
        self.message = None
