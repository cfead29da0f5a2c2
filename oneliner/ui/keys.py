"""
Raw terminal key input.

Keys are decoded from the raw byte stream of the terminal and delivered
to a callback on the event loop thread. On POSIX the terminal fd is
watched with ``loop.add_reader`` so no thread is involved; on Windows a
daemon thread reads with ``msvcrt`` and hands keys over with
``call_soon_threadsafe``.
"""

import asyncio
import codecs
import logging
import os
import sys
import threading
from typing import Callable, List, Optional

from oneliner.ui.messages import KeyMsg

logger = logging.getLogger(__name__)

KeyCallback = Callable[[KeyMsg], None]

_ESCAPE_SEQUENCES = {
    "\x1b[A": "up",
    "\x1b[B": "down",
    "\x1b[C": "right",
    "\x1b[D": "left",
    "\x1bOA": "up",
    "\x1bOB": "down",
    "\x1bOC": "right",
    "\x1bOD": "left",
    "\x1b[H": "home",
    "\x1b[F": "end",
    "\x1b[3~": "delete",
}

_CONTROL_KEYS = {
    "\r": "enter",
    "\n": "enter",
    "\x03": "ctrl+c",
    "\x04": "ctrl+d",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x15": "ctrl+u",
    "\t": "tab",
}


def parse_keys(data: str) -> List[KeyMsg]:
    """
    Decode a chunk of raw terminal input into key messages.

    A lone ESC (not followed by ``[`` or ``O``) is the escape key.
    Unknown escape sequences and other control characters are ignored.
    """
    keys: List[KeyMsg] = []
    i = 0
    while i < len(data):
        ch = data[i]

        if ch == "\x1b":
            matched = False
            for seq, name in _ESCAPE_SEQUENCES.items():
                if data.startswith(seq, i):
                    keys.append(KeyMsg(name))
                    i += len(seq)
                    matched = True
                    break
            if matched:
                continue
            if i + 1 < len(data) and data[i + 1] in "[O":
                # Skip an unsupported CSI/SS3 sequence up to its final byte
                j = i + 2
                while j < len(data) and not ("@" <= data[j] <= "~"):
                    j += 1
                i = j + 1
                continue
            keys.append(KeyMsg("esc"))
            i += 1
            continue

        if ch in _CONTROL_KEYS:
            keys.append(KeyMsg(_CONTROL_KEYS[ch]))
        elif ch.isprintable():
            keys.append(KeyMsg(ch, text=True))
        i += 1

    return keys


class KeyReader:
    """
    Puts a terminal into raw mode and reports decoded keys.

    Use as a context manager around the UI loop; the terminal mode is
    restored on exit.
    """

    def __init__(self, stream, on_key: KeyCallback):
        self.stream = stream
        self.on_key = on_key
        self._fd: Optional[int] = None
        self._old_settings = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()
        # Multibyte characters can be split across reads
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="ignore")

    def start(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        if sys.platform.startswith("win"):
            self._thread = threading.Thread(target=self._read_windows, daemon=True)
            self._thread.start()
            return

        import termios
        import tty

        self._fd = self.stream.fileno()
        self._old_settings = termios.tcgetattr(self._fd)
        tty.setraw(self._fd)
        # Keep output post-processing so rendered newlines still return
        mode = termios.tcgetattr(self._fd)
        mode[1] |= termios.OPOST
        termios.tcsetattr(self._fd, termios.TCSANOW, mode)
        loop.add_reader(self._fd, self._on_readable)

    def stop(self) -> None:
        self._stop.set()
        if self._fd is None:
            return

        import termios

        if self._loop is not None:
            self._loop.remove_reader(self._fd)
        termios.tcsetattr(self._fd, termios.TCSADRAIN, self._old_settings)
        self._fd = None

    def _on_readable(self) -> None:
        try:
            raw = os.read(self._fd, 1024)
        except OSError as e:
            logger.debug(f"Terminal read failed: {e}")
            return
        for key in parse_keys(self._decoder.decode(raw)):
            self.on_key(key)

    def _read_windows(self) -> None:  # pragma: no cover - Windows console only
        import msvcrt  # type: ignore

        translations = {"H": "up", "P": "down", "K": "left", "M": "right"}
        while not self._stop.is_set():
            ch = msvcrt.getwch()
            if ch in ("\x00", "\xe0"):
                name = translations.get(msvcrt.getwch())
                key = KeyMsg(name) if name else None
            else:
                decoded = parse_keys(ch)
                key = decoded[0] if decoded else None
            if key is not None and self._loop is not None:
                self._loop.call_soon_threadsafe(self.on_key, key)
