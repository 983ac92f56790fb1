"""Caller resolution for error-grade records.

Walks the current call stack and returns the first frame that belongs to
application code, skipping frames from this package and from the host
logging facility.

Frame names are the fully qualified ``"<module>.<qualname>"`` of the
running code. Depth 0 is the resolver's own frame (``get_frame``).

Three strategies share the ``Caller`` capability:

    SkipCaller(skip)          start the walk at a fixed depth
    PredicateCaller(if_call)  start at the first frame whose name matches
    FuncCaller(fn)            delegate to a caller-supplied function

Usage:
    from routelog.logging.caller import PredicateCaller

    hook.set_caller(PredicateCaller(lambda name: name.endswith(".emit")))
"""

import inspect
import threading
from dataclasses import dataclass
from types import FrameType
from typing import Callable, Iterator, Optional, Protocol

# Restrict the lookback frames to avoid runaway lookups.
MAXIMUM_CALLER_DEPTH = 25

# Frames contributed by get_frame, Caller.frame, WriterTable._write and
# RouteHook.fire when a record is fired directly.
INTERNAL_FRAMES = 4

# HookHandler.emit, Handler.handle, Logger.callHandlers, Logger.handle,
# Logger._log and Logger.error for a direct stdlib logger call.
LOGGER_CALL_SKIP = INTERNAL_FRAMES + 6

# Logger.log, LoggerAdapter.log and LoggerAdapter.error replace
# Logger.error for a call through a LoggerAdapter (e.g. ModuleLogger).
ADAPTER_CALL_SKIP = LOGGER_CALL_SKIP + 2

DEFAULT_CALLER_SKIP = INTERNAL_FRAMES

# Packages of the host facility; never reported as the caller.
HOST_PACKAGES = frozenset({"logging", "structlog"})

IfCallFrame = Callable[[str], bool]

# qualified package name, cached at first use
_hook_package: Optional[str] = None
_package_lock = threading.Lock()


@dataclass(frozen=True)
class Frame:
    """A resolved stack frame."""

    function: str
    file: str
    line: int


class Caller(Protocol):
    """Anything that can resolve the calling frame on demand."""

    def frame(self) -> Optional[Frame]: ...


def package_name(name: str) -> str:
    """Reduce a fully qualified function name to its package name.

    Trailing ``.identifier`` segments are stripped while the last period
    comes after the last slash.

    Example:
        >>> package_name("pkg/path.Type.Method")
        'pkg/path'
        >>> package_name("routelog.logging.hook.RouteHook.fire")
        'routelog'
    """
    while True:
        last_period = name.rfind(".")
        last_slash = name.rfind("/")
        if last_period > last_slash:
            name = name[:last_period]
        else:
            return name


def function_name(frame: FrameType) -> str:
    """Return the fully qualified name of the code running in ``frame``."""
    module = frame.f_globals.get("__name__", "")
    return f"{module}.{frame.f_code.co_qualname}"


def hook_package() -> Optional[str]:
    """Return the cached package identity, or None before first use."""
    return _hook_package


def _walk(frame: Optional[FrameType], limit: int) -> Iterator[FrameType]:
    while frame is not None and limit > 0:
        yield frame
        frame = frame.f_back
        limit -= 1


def _init_package(current: FrameType) -> None:
    global _hook_package

    if _hook_package is not None:
        return
    with _package_lock:
        if _hook_package is not None:
            return
        for frame in _walk(current, MAXIMUM_CALLER_DEPTH):
            name = function_name(frame)
            if "get_frame" in name:
                _hook_package = package_name(name)
                break


def _is_internal(name: str) -> bool:
    pkg = package_name(name)
    return pkg == _hook_package or pkg in HOST_PACKAGES


def get_frame(skip: int = 0, if_call: Optional[IfCallFrame] = None) -> Optional[Frame]:
    """Return the first frame outside this package and the host facility.

    Args:
        skip: Depth to start the walk from, 0 being this function.
        if_call: Optional predicate over frame names. When given, the walk
            starts at the first frame (within MAXIMUM_CALLER_DEPTH) whose
            name satisfies it; ``skip`` is kept if none does.

    Returns:
        The resolved Frame, or None if the walk ran out of frames.
    """
    current = inspect.currentframe()
    try:
        _init_package(current)

        if if_call is not None:
            for depth, frame in enumerate(_walk(current, MAXIMUM_CALLER_DEPTH)):
                if if_call(function_name(frame)):
                    skip = depth
                    break

        start = current
        for _ in range(skip):
            if start is None:
                return None
            start = start.f_back

        for frame in _walk(start, MAXIMUM_CALLER_DEPTH):
            name = function_name(frame)
            if not _is_internal(name):
                return Frame(function=name, file=frame.f_code.co_filename, line=frame.f_lineno)
        return None
    finally:
        del current


class SkipCaller:
    """Resolve the caller starting from a fixed stack depth."""

    def __init__(self, skip: int = DEFAULT_CALLER_SKIP):
        self._lock = threading.Lock()
        self._skip = skip

    @property
    def skip(self) -> int:
        with self._lock:
            return self._skip

    def set_skip(self, skip: int) -> "SkipCaller":
        with self._lock:
            self._skip = skip
        return self

    def frame(self) -> Optional[Frame]:
        return get_frame(self.skip)


class PredicateCaller(SkipCaller):
    """Resolve the caller starting from the first frame matching a predicate.

    ``skip`` is only used when no frame within MAXIMUM_CALLER_DEPTH matches.
    """

    def __init__(self, if_call: IfCallFrame, skip: int = DEFAULT_CALLER_SKIP):
        super().__init__(skip)
        self._if_call = if_call

    def set_if_call(self, if_call: IfCallFrame) -> "PredicateCaller":
        with self._lock:
            self._if_call = if_call
        return self

    def frame(self) -> Optional[Frame]:
        with self._lock:
            skip, if_call = self._skip, self._if_call
        return get_frame(skip, if_call)


class FuncCaller:
    """Delegate caller resolution to a user-supplied function.

    For call paths whose stack shape the other strategies cannot describe.
    """

    def __init__(self, fn: Callable[[], Optional[Frame]]):
        self._fn = fn

    def frame(self) -> Optional[Frame]:
        return self._fn()
