# -*- coding: utf-8 -*-

from __future__ import annotations

import ast
import ctypes
import datetime as dt
import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from core.constants import MAX_RANGE, SCRIPT_TIME_LIMIT_SEC
from sandbox.clock import Clock, Moment

logger = logging.getLogger(__name__)

SCRIPT_FILENAME = "<script>"

_FORBIDDEN_NODES = (
    ast.Import,
    ast.ImportFrom,
    ast.Global,
    ast.Nonlocal,
    ast.ClassDef,
    ast.AsyncFunctionDef,
    ast.AsyncFor,
    ast.AsyncWith,
    ast.Await,
    ast.Yield,
    ast.YieldFrom,
)
if hasattr(ast, "Match"):
    _FORBIDDEN_NODES += (ast.Match,)

_FORBIDDEN_ATTRS = {"format_map", "mro"}

# generator, coroutine, frame, traceback and code object internals
_FORBIDDEN_ATTR_PREFIXES = ("gi_", "cr_", "ag_", "f_", "tb_", "co_")

# the only names an except clause may filter on; never rebound by a script
_EXCEPTION_NAMES = {
    "Exception",
    "KeyError",
    "IndexError",
    "TypeError",
    "ValueError",
    "ZeroDivisionError",
}


class ScriptRejected(Exception):
    pass


class ScriptTimeout(BaseException):
    # BaseException so `except Exception` inside a script cannot swallow it
    pass


@dataclass
class RunResult:
    logs: List[str] = field(default_factory=list)
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class _Validator(ast.NodeVisitor):
    """
    Rejects anything that reaches outside the capability set, and anything
    that runs script code while a ScriptTimeout unwinds (finally blocks,
    computed except filters), since the deadline fires only once.
    """

    def _reject(self, node: ast.AST, what: str) -> None:
        line = getattr(node, "lineno", "?")
        raise ScriptRejected(f"{what} is not allowed (line {line})")

    def _check_binding(self, node: ast.AST, name: Optional[str]) -> None:
        if name and name in _EXCEPTION_NAMES:
            self._reject(node, f"Rebinding {name!r}")

    def generic_visit(self, node: ast.AST) -> None:
        if isinstance(node, _FORBIDDEN_NODES):
            self._reject(node, type(node).__name__)
        super().generic_visit(node)

    def visit_Name(self, node: ast.Name) -> None:
        if node.id.startswith("_"):
            self._reject(node, f"Name {node.id!r}")
        if not isinstance(node.ctx, ast.Load):
            self._check_binding(node, node.id)
        self.generic_visit(node)

    def visit_arg(self, node: ast.arg) -> None:
        self._check_binding(node, node.arg)
        self.generic_visit(node)

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._check_binding(node, node.name)
        self.generic_visit(node)

    def visit_Attribute(self, node: ast.Attribute) -> None:
        attr = node.attr
        if (
            attr.startswith("_")
            or attr.startswith(_FORBIDDEN_ATTR_PREFIXES)
            or attr in _FORBIDDEN_ATTRS
        ):
            self._reject(node, f"Attribute {attr!r}")
        self.generic_visit(node)

    def visit_Try(self, node: ast.AST) -> None:
        if node.finalbody:
            self._reject(node.finalbody[0], "finally")
        self.generic_visit(node)

    visit_TryStar = visit_Try

    def visit_ExceptHandler(self, node: ast.ExceptHandler) -> None:
        if node.type is None:
            self._reject(node, "Bare except")
        filters = node.type.elts if isinstance(node.type, ast.Tuple) else [node.type]
        for f in filters:
            if not (isinstance(f, ast.Name) and f.id in _EXCEPTION_NAMES):
                self._reject(node, "Except filter other than a builtin exception")
        self._check_binding(node, node.name)
        self.generic_visit(node)


def compile_script(source: str):
    """
    Parse, validate and wrap the script as the body of a function, so that a
    top-level `return` produces the result.
    """
    tree = ast.parse(source or "", filename=SCRIPT_FILENAME, mode="exec")
    _Validator().visit(tree)

    wrapper = ast.parse("def __script__():\n    pass\n", filename=SCRIPT_FILENAME)
    wrapper.body[0].body = tree.body or [ast.Pass()]
    ast.fix_missing_locations(wrapper)
    return compile(wrapper, SCRIPT_FILENAME, "exec")


def _json_default(o: Any) -> Any:
    if isinstance(o, Moment):
        return o.iso()
    if isinstance(o, (dt.datetime, dt.date, dt.time)):
        return o.isoformat()
    if isinstance(o, (set, frozenset)):
        return sorted(o, key=str)
    return str(o)


def format_value(value: Any) -> str:
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, indent=2, default=_json_default, ensure_ascii=False)
    return str(value)


def _range(*args: int) -> range:
    r = range(*args)
    if len(r) > MAX_RANGE:
        raise ValueError(f"range() is limited to {MAX_RANGE} items")
    return r


_SAFE_BUILTINS: Dict[str, Any] = {
    "abs": abs,
    "all": all,
    "any": any,
    "bool": bool,
    "dict": dict,
    "divmod": divmod,
    "enumerate": enumerate,
    "filter": filter,
    "float": float,
    "int": int,
    "isinstance": isinstance,
    "len": len,
    "list": list,
    "map": map,
    "max": max,
    "min": min,
    "range": _range,
    "reversed": reversed,
    "round": round,
    "set": set,
    "sorted": sorted,
    "str": str,
    "sum": sum,
    "tuple": tuple,
    "zip": zip,
    "Exception": Exception,
    "KeyError": KeyError,
    "IndexError": IndexError,
    "TypeError": TypeError,
    "ValueError": ValueError,
    "ZeroDivisionError": ZeroDivisionError,
}


def default_capabilities() -> Dict[str, Any]:
    return {"clock": Clock()}


def _capturing_print(logs: List[str]) -> Callable[..., None]:
    def _print(*args: Any, sep: str = " ", **_ignored: Any) -> None:
        logs.append(str(sep).join(format_value(a) for a in args))

    return _print


def _raise_in_thread(thread_id: int, exc_type: Optional[type]) -> None:
    # exc_type None drops an exception that is still pending
    ctypes.pythonapi.PyThreadState_SetAsyncExc(
        ctypes.c_ulong(thread_id),
        ctypes.py_object(exc_type) if exc_type is not None else None,
    )


class _Watchdog:
    """
    Raises ScriptTimeout in the script's thread once the limit has passed,
    and keeps raising it until the script is finished.
    """

    RETRY_SEC = 0.05

    def __init__(self, time_limit: float):
        self.time_limit = time_limit
        self.thread_id = threading.get_ident()
        self._done = threading.Event()
        self._guard = threading.Lock()
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def _run(self) -> None:
        if self._done.wait(self.time_limit):
            return
        while True:
            with self._guard:
                if self._done.is_set():
                    return
                _raise_in_thread(self.thread_id, ScriptTimeout)
            if self._done.wait(self.RETRY_SEC):
                return

    def finish(self) -> None:
        with self._guard:
            self._done.set()
            _raise_in_thread(self.thread_id, None)


def execute(
    source: str,
    time_limit: float = SCRIPT_TIME_LIMIT_SEC,
    capabilities: Optional[Dict[str, Any]] = None,
) -> RunResult:
    """
    Run a user script against the enumerated capability set.

    Returns the print() output in order plus either the returned value or
    the error message, never both.
    """
    result = RunResult()
    try:
        code = compile_script(source)
    except SyntaxError as e:
        result.error = f"SyntaxError: {e.msg} (line {e.lineno})"
        return result
    except ScriptRejected as e:
        result.error = str(e)
        return result

    builtins = dict(_SAFE_BUILTINS)
    builtins["print"] = _capturing_print(result.logs)
    env: Dict[str, Any] = {"__builtins__": builtins}
    env.update(capabilities if capabilities is not None else default_capabilities())
    exec(code, env)
    script = env["__script__"]

    watchdog = _Watchdog(time_limit)
    try:
        watchdog.start()
        try:
            result.value = script()
        finally:
            watchdog.finish()
    except ScriptTimeout:
        result.error = f"Script exceeded {time_limit:g} s time limit"
    except Exception as e:
        result.error = f"{type(e).__name__}: {e}"

    if result.error:
        result.value = None
        logger.debug("script failed: %s", result.error)
    return result
