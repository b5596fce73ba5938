import sys

from typing import Set

GREEN = "\x1b[32m"
RESET = "\x1b[0m"


class Logger:
    # Keys of summaries already printed by summary_once, shared by every
    # logger since several passes may run back to back in one process
    _printed_once: Set[str] = set()

    def __init__(self, debug: bool = False):
        self.debug = debug

    def log(self, message: str):
        if self.debug:
            print(f"[apptargets] {message}")

    def summary(self, success: bool, message: str, detail: str = None):
        if self.debug:
            suffix = f" - {detail}" if detail else ""
            print(f"[apptargets] {message}{suffix}")
            return
        symbol = f"{GREEN}✔{RESET}" if success else "✖"
        suffix = f" | {detail}" if detail else ""
        print(f"{symbol} {message}{suffix}")

    def summary_once(self, key: str, success: bool, message: str, detail: str = None):
        if key in Logger._printed_once:
            return
        Logger._printed_once.add(key)
        self.summary(success, message, detail)

    def warn(self, message: str):
        if self.debug:
            print(f"[apptargets] {message}", file=sys.stderr)
        else:
            print(f"⚠ {message}", file=sys.stderr)

    def error(self, message: str):
        print(f"[apptargets] {message}", file=sys.stderr)


def reset_logger_state():
    Logger._printed_once.clear()
