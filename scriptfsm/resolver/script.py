"""
Python script resolver.

Backs a state machine with a user script written in Python. The script's
module-level names are its exports:

```python
def is_digit(src, dst, v):
    return v[:1].isdigit()

def enter_error(src, dst, v):
    return "invalid number: " + v

def fail(src, dst, v):
    return error("an error occurred")
```

The script is compiled once. Every run executes it into a fresh namespace,
so module-level state in the script never leaks between runs, and two
concurrent runs never share an interpreter context.

Scripts run against a reduced builtins table: importing a blocked module
raises ImportError, and a few host-interaction builtins are removed. The guard
is not a security boundary: introspection (for example ``print.__self__``)
still reaches the real builtins module, so only run trusted scripts.

Two helpers are injected:
- ``error(message)``: build a domain error result
- ``immutable(value)``: freeze a value
"""

import builtins
import logging
from contextlib import contextmanager
from types import CodeType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Union

from scriptfsm.errors import (
    CompileError,
    FunctionNotFoundError,
    InvocationError,
    NotCallableError,
    RunError,
)
from scriptfsm.resolver.protocol import (
    CallableResolver,
    InvocationProgram,
    Invoker,
    Outcome,
    ProbeResult,
    ProbeStatus,
    probe_object,
)
from scriptfsm.resolver.values import error, freeze

logger = logging.getLogger(__name__)

# Host access plus the modules that re-export it (importlib.import_module,
# builtins.open, io.open, raw FFI). Root names only: "os" also blocks "os.path".
DEFAULT_BLOCKED_MODULES = (
    "os",
    "posix",
    "nt",
    "sys",
    "subprocess",
    "shutil",
    "socket",
    "importlib",
    "builtins",
    "io",
    "_io",
    "ctypes",
)

# Builtins that reach outside the script sandbox
_REMOVED_BUILTINS = frozenset({"open", "input", "breakpoint", "exit", "quit", "help"})

_HELPERS: Dict[str, Any] = {"error": error, "immutable": freeze}

_MODULE_NAME = "user"


def _make_builtins(blocked_modules: frozenset) -> Dict[str, Any]:
    """Build a per-namespace builtins table with a guarded __import__."""
    real_import = builtins.__import__

    def guarded_import(name, globals=None, locals=None, fromlist=(), level=0):
        root = name.partition(".")[0]
        if level == 0 and root in blocked_modules:
            logger.warning(f"Blocked import of '{name}' from user script")
            raise ImportError(f"import of '{name}' is not allowed")
        return real_import(name, globals, locals, fromlist, level)

    table = {
        k: v for k, v in vars(builtins).items() if k not in _REMOVED_BUILTINS
    }
    table["__import__"] = guarded_import
    return table


def _exports(namespace: Dict[str, Any]) -> Dict[str, Any]:
    """Select the exported names of an executed script namespace."""
    names: Iterable[str]
    if "__all__" in namespace:
        names = [
            n for n in namespace["__all__"] if isinstance(n, str) and n in namespace
        ]
    else:
        names = list(namespace)

    result = {}
    for name in names:
        if name.startswith("_"):
            continue
        obj = namespace[name]
        # injected helpers are not exports unless the script rebinds them
        if _HELPERS.get(name) is obj:
            continue
        result[name] = obj
    return result


class ScriptResolver(CallableResolver):
    """
    Resolve callables from Python script source.

    Example:
        ```python
        resolver = ScriptResolver("def truthy(src, dst, v):\\n    return bool(v)\\n")
        resolver.probe("truthy")   # ProbeResult(status=OK, arity=3)
        program = resolver.compile()
        ```
    """

    def __init__(
        self,
        source: Union[str, bytes],
        blocked_modules: Optional[Iterable[str]] = None,
        filename: str = "<user>",
    ):
        """
        Args:
            source: Python source of the user script (bytes are decoded as UTF-8)
            blocked_modules: Top-level module names scripts may not import
                (default: DEFAULT_BLOCKED_MODULES)
            filename: Name reported in tracebacks and compile errors
        """
        if isinstance(source, bytes):
            source = source.decode("utf-8")
        self.source = source
        self.filename = filename
        self.blocked_modules = frozenset(
            DEFAULT_BLOCKED_MODULES if blocked_modules is None else blocked_modules
        )
        self._code: Optional[CodeType] = None
        self._probe_exports: Optional[Dict[str, Any]] = None

    def _compile_code(self) -> CodeType:
        if self._code is None:
            try:
                self._code = compile(self.source, self.filename, "exec")
            except (SyntaxError, ValueError) as e:
                raise CompileError(
                    f"failed to compile script: {e}",
                    context={"filename": self.filename},
                ) from e
        return self._code

    def _load_exports(self) -> Dict[str, Any]:
        """Execute the script once into a throwaway namespace."""
        code = self._compile_code()
        try:
            return _exports(_execute(code, self.blocked_modules))
        except Exception as e:
            raise CompileError(
                f"script execution error: {type(e).__name__}: {e}",
                context={"filename": self.filename},
            ) from e

    def _exports_for_probe(self) -> Dict[str, Any]:
        if self._probe_exports is None:
            self._probe_exports = self._load_exports()
        return self._probe_exports

    def names(self) -> list[str]:
        """List all exported names."""
        return list(self._exports_for_probe())

    def probe(self, name: str) -> ProbeResult:
        exports = self._exports_for_probe()
        if name not in exports:
            return ProbeResult(name=name, status=ProbeStatus.NOT_FOUND)
        return probe_object(name, exports[name])

    def compile(self) -> "ScriptProgram":
        # A trial load surfaces scripts that fail at import time here,
        # instead of on every run.
        exports = self._load_exports()
        logger.debug(
            f"Compiled script {self.filename} with {len(exports)} exports"
        )
        return ScriptProgram(self._compile_code(), self.blocked_modules)


def _execute(code: CodeType, blocked_modules: frozenset) -> Dict[str, Any]:
    namespace: Dict[str, Any] = {
        "__name__": _MODULE_NAME,
        "__builtins__": _make_builtins(blocked_modules),
    }
    namespace.update(_HELPERS)
    exec(code, namespace)
    return namespace


class ScriptProgram(InvocationProgram):
    """Compiled user script. Holds only immutable state."""

    def __init__(self, code: CodeType, blocked_modules: frozenset):
        self._code = code
        self._blocked_modules = blocked_modules

    @contextmanager
    def session(self) -> Iterator["ScriptInvoker"]:
        try:
            exports = _exports(_execute(self._code, self._blocked_modules))
        except Exception as e:
            raise InvocationError("<module>", "", "", e) from e
        yield ScriptInvoker(exports)


class ScriptInvoker(Invoker):
    """Invokes exports of one freshly executed script namespace."""

    def __init__(self, exports: Dict[str, Any]):
        self._exports = exports

    def invoke(
        self,
        function: str,
        src: str,
        dst: str,
        value: Any,
        condition: bool = False,
    ) -> Outcome:
        return invoke_export(self._exports, function, src, dst, value, condition)


def invoke_export(
    exports: Mapping[str, Any],
    function: str,
    src: str,
    dst: str,
    value: Any,
    condition: bool = False,
) -> Outcome:
    """
    Look up and call an export, translating the result.

    Missing or non-callable exports (possible on machines compiled without
    validation) surface here as InvocationError.
    """
    if function not in exports:
        raise InvocationError(function, src, dst, FunctionNotFoundError(function))
    fn = exports[function]
    if not callable(fn):
        raise InvocationError(function, src, dst, NotCallableError(function))

    logger.debug(f"Invoking '{function}' ({src} -> {dst})")
    try:
        # translating the result may call back into user code (__bool__, __iter__)
        return Outcome.from_result(fn(src, dst, value), condition=condition)
    except RunError:
        raise
    except Exception as e:
        raise InvocationError(function, src, dst, e) from e
