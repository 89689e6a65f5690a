"""Shared pytest fixtures."""

import json
import sys
import textwrap
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import pytest


@dataclass
class FakeClaude:
    """An executable standing in for the Claude CLI."""

    path: str
    record_path: Path

    def record(self) -> dict:
        """argv, cwd and pid of the last run."""
        return json.loads(self.record_path.read_text())


@pytest.fixture
def make_fake_claude(tmp_path) -> Callable[..., FakeClaude]:
    """
    Build a script that records its argv/cwd/pid, writes the given lines
    to stderr and stdout, optionally sleeps, and exits with exit_code.
    """
    def _make(
        stdout_lines: Sequence[str] = (),
        exit_code: int = 0,
        stderr_lines: Sequence[str] = (),
        sleep_after: float = 0.0,
        name: str = "claude"
    ) -> FakeClaude:
        script = tmp_path / name
        record = tmp_path / f"{name}.record.json"
        script.write_text(textwrap.dedent(f"""\
            #!{sys.executable}
            import json, os, sys, time
            with open({str(record)!r}, "w") as f:
                json.dump({{"argv": sys.argv[1:], "cwd": os.getcwd(), "pid": os.getpid()}}, f)
            for line in {list(stderr_lines)!r}:
                sys.stderr.write(line + "\\n")
            sys.stderr.flush()
            for line in {list(stdout_lines)!r}:
                sys.stdout.write(line + "\\n")
                sys.stdout.flush()
            time.sleep({float(sleep_after)!r})
            sys.exit({int(exit_code)!r})
        """))
        script.chmod(0o755)
        return FakeClaude(path=str(script), record_path=record)

    return _make


class ManualTimer:
    """Timer handle fired explicitly by the test."""

    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled and not self.fired:
            self.fired = True
            self.callback()


class ManualScheduler:
    """Scheduler whose timers only fire when the test says so."""

    def __init__(self):
        self.timers: List[ManualTimer] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def live_timers(self) -> List[ManualTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def fire_all(self) -> None:
        for timer in self.live_timers:
            timer.fire()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


def stream_json(**fields) -> str:
    """Encode one stream-json line."""
    return json.dumps(fields)


@pytest.fixture
def init_line() -> Callable[[Optional[str]], str]:
    def _init(session_id: Optional[str] = "sess-1") -> str:
        return stream_json(type="system", subtype="init", session_id=session_id, model="claude-test", tools=["Read"])
    return _init
