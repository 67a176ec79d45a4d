# book_service/ai.py
"""
Price lookup through a local command-line text-generation model.

The model (``ollama run tinyllama:latest`` by default) is started once per
lookup, fed a short prompt on stdin and read back until it exits. Its
terminal output is noisy: spinner glyphs from the braille block and cursor
control sequences are interleaved with the answer, so every line is
sanitized before a ``$12.99``-style token is pulled out of it.

A lookup never raises. Failures are reported as a ``FailureKind`` on the
result and logged, and the catalog simply shows no price.
"""

import logging
import os
import re
import signal
import subprocess
import threading
from enum import Enum
from typing import List, Optional, Sequence

from pydantic import BaseModel

from .config import Settings, get_settings


logger = logging.getLogger(__name__)

PRICE_QUESTION = "provide price for book "
BY = " by "

CONTROL_SEQUENCES = (
    "\x1b[?25l",  # hide cursor
    "\x1b[?25h",  # show cursor
    "\x1b[?2026l",  # end synchronized update
    "\x1b[?2026h",  # begin synchronized update
    "\x1b[1G",  # cursor to column 1
    "\x1b[K",  # erase to end of line
    "\x1b[2K",  # erase whole line
)

# braille patterns block, used by terminal spinners
_BRAILLE_RE = re.compile("[\u2800-\u28ff]")

# "$" then digits, optionally "." and exactly two digits
PRICE_PATTERN = re.compile(r"\$\d+(?:\.\d{2})?")

# bounded wait for leftover output once the process group is killed
DRAIN_SECONDS = 2.0


class FailureKind(str, Enum):
    SPAWN = "spawn"
    IO = "io"
    TIMEOUT = "timeout"
    BUSY = "busy"
    NO_MATCH = "no_match"
    DISABLED = "disabled"


class ModelOutput(BaseModel):
    """Everything one model invocation printed, plus how it ended."""

    text: str = ""
    exit_code: Optional[int] = None
    failure: Optional[FailureKind] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


class PriceResult(BaseModel):
    price: Optional[str] = None
    failure: Optional[FailureKind] = None


def sanitize_line(line: str) -> str:
    """Strip cursor-control sequences and braille spinner glyphs from a line.

    Removal is repeated until nothing changes, since deleting a glyph can
    join the two halves of a control sequence.
    """
    while True:
        cleaned = _BRAILLE_RE.sub("", line)
        for seq in CONTROL_SEQUENCES:
            cleaned = cleaned.replace(seq, "")
        if cleaned == line:
            return cleaned
        line = cleaned


def sanitize(text: str) -> str:
    # split on "\n" only; "\r" and other separators are content
    return "\n".join(sanitize_line(line) for line in text.split("\n"))


def extract_price(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    m = PRICE_PATTERN.search(text)
    return m.group(0) if m else None


def build_price_query(title: str, author: str) -> str:
    return PRICE_QUESTION + title + BY + author


class ModelBridge:
    """Runs the external model, one subprocess per call.

    At most ``max_concurrency`` processes run at the same time across all
    threads; a call that cannot get a slot within ``slot_timeout`` (default:
    ``timeout``) gives up with ``FailureKind.BUSY``.

    The program runs in its own session. Past the deadline the whole process
    group is killed, so wrapper commands (``sh -c ...``, ``powershell.exe
    ollama ...``) cannot keep the call waiting through a child that still
    holds the output pipe.
    """

    def __init__(
        self,
        argv: Sequence[str],
        timeout: float,
        max_concurrency: int = 1,
        slot_timeout: Optional[float] = None,
    ):
        self.argv: List[str] = list(argv)
        self.timeout = timeout
        self.slot_timeout = timeout if slot_timeout is None else slot_timeout
        self._slots = threading.BoundedSemaphore(max_concurrency)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelBridge":
        return cls(
            settings.price_argv(),
            timeout=settings.price_timeout_seconds,
            max_concurrency=settings.price_max_concurrency,
        )

    def run(self, prompt: str) -> ModelOutput:
        if not self._slots.acquire(timeout=self.slot_timeout):
            logger.warning("No free model slot after %.1fs, skipping", self.slot_timeout)
            return ModelOutput(failure=FailureKind.BUSY)
        try:
            return self._run(prompt)
        finally:
            self._slots.release()

    def _run(self, prompt: str) -> ModelOutput:
        if not self.argv:
            logger.warning("No model command configured")
            return ModelOutput(failure=FailureKind.SPAWN)
        try:
            proc = subprocess.Popen(
                self.argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as e:
            logger.warning("Could not start %s: %s", self.argv[0], e)
            return ModelOutput(failure=FailureKind.SPAWN)

        failure: Optional[FailureKind] = None
        # leaving the block closes the pipes and reaps the process
        with proc:
            try:
                # communicate() writes the prompt, closes stdin and reads to EOF
                raw, _ = proc.communicate(input=prompt.encode("utf-8"), timeout=self.timeout)
            except subprocess.TimeoutExpired:
                _kill_group(proc)
                try:
                    raw, _ = proc.communicate(timeout=DRAIN_SECONDS)
                except subprocess.TimeoutExpired:
                    # something outside the group still holds the pipe
                    raw = b""
                failure = FailureKind.TIMEOUT
                logger.warning("Model did not answer within %.1fs, killed", self.timeout)
            except OSError as e:
                _kill_group(proc)
                raw = b""
                failure = FailureKind.IO
                logger.warning("I/O error talking to the model: %s", e)

        text = _decode(raw)
        if failure is not None:
            return ModelOutput(text=text, exit_code=proc.returncode, failure=failure)

        logger.debug("Model exited with code %s", proc.returncode)
        if proc.returncode != 0:
            logger.info("Model exited with code %s, keeping its output", proc.returncode)
        return ModelOutput(text=text, exit_code=proc.returncode)


def _decode(raw: Optional[bytes]) -> str:
    return sanitize((raw or b"").decode("utf-8", errors="replace"))


def _kill_group(proc: subprocess.Popen) -> None:
    if hasattr(os, "killpg"):
        try:
            os.killpg(proc.pid, signal.SIGKILL)
            return
        except ProcessLookupError:
            return
        except OSError as e:
            logger.debug("killpg(%s) failed: %s", proc.pid, e)
    proc.kill()


class PriceLookup:
    """Turns (title, author) into a price string using a ``ModelBridge``."""

    def __init__(self, bridge: Optional[ModelBridge], enabled: bool = True):
        self.bridge = bridge
        self.enabled = enabled and bridge is not None

    def price_for(self, title: str, author: str) -> PriceResult:
        if not self.enabled:
            return PriceResult(failure=FailureKind.DISABLED)

        output = self.bridge.run(build_price_query(title, author))
        if not output.ok:
            return PriceResult(failure=output.failure)

        price = extract_price(output.text)
        if price is None:
            logger.info("No price in model answer for %r by %r", title, author)
            return PriceResult(failure=FailureKind.NO_MATCH)
        return PriceResult(price=price)


_lookup: Optional[PriceLookup] = None
_lookup_lock = threading.Lock()


def get_price_lookup() -> PriceLookup:
    """Process-wide lookup, so the concurrency limit is shared by all requests."""
    global _lookup
    with _lookup_lock:
        if _lookup is None:
            settings = get_settings()
            _lookup = PriceLookup(
                ModelBridge.from_settings(settings),
                enabled=settings.price_lookup_enabled,
            )
        return _lookup
