"""Logging configuration for the CLI and embedding applications.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed by the application through ``setup_logging``.

Public API:
    setup_logging(log_level="INFO", log_file=None, json=False, context={"doc": "top.gbr"})
    get_logger(name)
    push_context(doc="bottom.gbr")
    pop_context(keys=["doc"])

Format examples:
    Human: 2026-10-18T13:45:12.345Z | INFO     | doc=top.gbr | Converting 120 functions
    JSON:  {"t": "2026-10-18T13:45:12.345+00:00", "lvl": "INFO", "doc": "top.gbr", "msg": "..."}

Context uses contextvars, so fields are isolated per thread and task.
Repeated setup_logging() calls replace handlers instead of duplicating them.
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


_context_var = contextvars.ContextVar('photoplot_logging_context', default={})

_handlers: List[logging.Handler] = []

_LEVEL_COLORS = {
    'DEBUG': '\033[36m',
    'INFO': '\033[32m',
    'WARNING': '\033[33m',
    'ERROR': '\033[31m',
    'CRITICAL': '\033[35m',
}
_RESET = '\033[0m'


class ContextFormatter(logging.Formatter):
    """Formatter that appends contextual fields, as text or JSON lines."""

    def __init__(self, fmt_mode: str = "human", use_color: bool = True):
        super().__init__()
        if fmt_mode not in ("human", "json"):
            raise ValueError(f"Unknown log format: {fmt_mode}. Use 'human' or 'json'.")
        self.fmt_mode = fmt_mode
        self.use_color = use_color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        context = _context_var.get({})
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)

        if self.fmt_mode == "json":
            log_dict = {
                't': ts.isoformat(),
                'lvl': record.levelname,
                'name': record.name,
                **context,
                'msg': record.getMessage(),
            }
            if record.exc_info:
                log_dict['exc'] = self.formatException(record.exc_info)
            return json.dumps(log_dict, default=str)

        ts_str = ts.strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'
        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{_LEVEL_COLORS.get(record.levelname, '')}{level}{_RESET}"
        context_str = ' '.join(f"{k}={v}" for k, v in context.items())
        if context_str:
            context_str = f"{context_str} | "

        line = f"{ts_str} | {level} | {context_str}{record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    context: Optional[Dict[str, Any]] = None,
) -> List[logging.Handler]:
    """Configure the ``photoplot`` logger hierarchy.

    Parameters
    ----------
    log_level : str
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL"
    log_file : str, optional
        Also log to this file (plain or JSON lines, never colored)
    json : bool
        Use JSON lines on every handler
    color : bool
        Colorize console levels when stderr is a TTY
    to_stderr : bool
        Log to stderr
    context : dict, optional
        Initial contextual fields, e.g. ``{"doc": "top.gbr"}``

    Returns
    -------
    list[logging.Handler]
        Installed handlers.

    Raises
    ------
    ValueError
        On an unknown log level.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    root = logging.getLogger("photoplot")
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()
    _handlers.clear()

    root.setLevel(level)
    fmt_mode = "json" if json else "human"

    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter(fmt_mode, use_color=color))
        _handlers.append(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(ContextFormatter(fmt_mode, use_color=False))
        _handlers.append(file_handler)

    for handler in _handlers:
        root.addHandler(handler)

    if context:
        push_context(**context)

    return list(_handlers)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def push_context(**kwargs) -> None:
    """Add contextual fields to all subsequent log records.

    Examples
    --------
    >>> push_context(doc="top.gbr")
    >>> logger.info("Converted")  # -> "... | doc=top.gbr | Converted"
    """
    current = _context_var.get({})
    _context_var.set({**current, **kwargs})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Remove contextual fields; all of them when *keys* is None."""
    if keys is None:
        _context_var.set({})
        return
    current = dict(_context_var.get({}))
    for key in keys:
        current.pop(key, None)
    _context_var.set(current)


def current_context() -> Dict[str, Any]:
    return dict(_context_var.get({}))
