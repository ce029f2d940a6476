"""Route uncaught exceptions into the application log."""

from __future__ import annotations

import logging
import sys
import threading
from types import TracebackType
from typing import Optional, Type

_LOGGER = logging.getLogger("taskpulse.exceptions")
_INSTALLED = False
_PREVIOUS_SYS_HOOK = None
_PREVIOUS_THREAD_HOOK = None


def _log_exception(exc_type: Type[BaseException], exc_value: BaseException, exc_traceback: Optional[TracebackType]) -> None:
    _LOGGER.critical("Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback))


def install_global_exception_logger() -> None:
    """Log uncaught exceptions from the main thread and worker threads, then defer to the previous hooks."""

    global _INSTALLED, _PREVIOUS_SYS_HOOK, _PREVIOUS_THREAD_HOOK
    if _INSTALLED:
        return

    _PREVIOUS_SYS_HOOK = sys.excepthook
    _PREVIOUS_THREAD_HOOK = threading.excepthook

    def _handle_exception(exc_type: Type[BaseException], exc_value: BaseException, exc_traceback: Optional[TracebackType]) -> None:
        if not issubclass(exc_type, KeyboardInterrupt):
            _log_exception(exc_type, exc_value, exc_traceback)
        if _PREVIOUS_SYS_HOOK is not None:
            _PREVIOUS_SYS_HOOK(exc_type, exc_value, exc_traceback)
        else:
            sys.__excepthook__(exc_type, exc_value, exc_traceback)

    def _handle_thread_exception(args: threading.ExceptHookArgs) -> None:
        if not issubclass(args.exc_type, KeyboardInterrupt):
            _log_exception(args.exc_type, args.exc_value, args.exc_traceback)
        if callable(_PREVIOUS_THREAD_HOOK):
            _PREVIOUS_THREAD_HOOK(args)

    sys.excepthook = _handle_exception
    threading.excepthook = _handle_thread_exception
    _INSTALLED = True


def uninstall_global_exception_logger() -> None:
    global _INSTALLED
    if not _INSTALLED:
        return
    if _PREVIOUS_SYS_HOOK is not None:
        sys.excepthook = _PREVIOUS_SYS_HOOK
    if _PREVIOUS_THREAD_HOOK is not None:
        threading.excepthook = _PREVIOUS_THREAD_HOOK
    _INSTALLED = False
