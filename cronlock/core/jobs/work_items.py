"""Work item variants a job can carry.

The shape of the user's configuration (``command`` / ``function`` / ``class``,
and the several accepted ``class`` shapes) is resolved once, at registration,
into one of the frozen dataclasses below.
"""

import importlib
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from cronlock.core.common.exceptions import ConfigError, DispatchFailure
from cronlock.core.common.types import LaunchBackend, WorkKind

DEFAULT_METHOD = "run"

WORK_KEYS = tuple(kind.value for kind in WorkKind)


def import_object(path: str) -> Any:
    """
    Import an object from ``"package.module:attr"`` or ``"package.module.attr"``.

    Raises:
        ImportError: Module cannot be imported
        AttributeError: Attribute not found in module
    """
    if ":" in path:
        module_name, _, attr_path = path.partition(":")
    else:
        module_name, _, attr_path = path.rpartition(".")
    if not module_name or not attr_path:
        raise ImportError(f"'{path}' is not an import path")

    obj: Any = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        obj = getattr(obj, attr)
    return obj


def object_path(obj: Any) -> str | None:
    """
    Return the import path of a module-level function or class.

    None when the object cannot be re-imported by path in another interpreter
    (lambdas, closures, objects defined in ``__main__``).
    """
    module = getattr(obj, "__module__", None)
    qualname = getattr(obj, "__qualname__", None)
    if not module or not qualname or module == "__main__" or "<" in qualname:
        return None
    path = f"{module}:{qualname}"
    try:
        if import_object(path) is not obj:
            return None
    except (ImportError, AttributeError):
        return None
    return path


def _as_args(value: Any) -> tuple:
    if not value:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


@dataclass(frozen=True)
class ShellCommand:
    """Run a shell command in the runner process."""

    command: str

    kind: ClassVar[WorkKind] = WorkKind.COMMAND

    @property
    def backend(self) -> LaunchBackend:
        return LaunchBackend.SUBPROCESS

    def to_config(self) -> dict[str, Any]:
        return {"command": self.command}


@dataclass(frozen=True)
class FunctionCall:
    """
    Call a Python callable with no arguments.

    ``target`` is an import path when the callable can be re-imported by a new
    interpreter, otherwise the callable itself, which then only travels to a
    forked runner.
    """

    target: str | Callable[[], Any]

    kind: ClassVar[WorkKind] = WorkKind.FUNCTION

    @property
    def backend(self) -> LaunchBackend:
        if isinstance(self.target, str):
            return LaunchBackend.SUBPROCESS
        return LaunchBackend.FORK

    def resolve(self) -> Callable[[], Any]:
        if not isinstance(self.target, str):
            return self.target
        try:
            func = import_object(self.target)
        except (ImportError, AttributeError) as e:
            raise DispatchFailure(f"Function {self.target} not found: {e}") from e
        if not callable(func):
            raise DispatchFailure(f"{self.target} is not callable")
        return func

    def to_config(self) -> dict[str, Any]:
        if not isinstance(self.target, str):
            raise ConfigError(
                f"Function {self.target!r} is not importable and cannot be encoded"
            )
        return {"function": self.target}


@dataclass(frozen=True)
class ClassMethodCall:
    """Instantiate a class and invoke one of its methods."""

    target: str | type
    args: tuple = ()
    method: str = DEFAULT_METHOD
    method_args: tuple = ()

    kind: ClassVar[WorkKind] = WorkKind.CLASS

    @property
    def backend(self) -> LaunchBackend:
        return LaunchBackend.FORK

    @property
    def class_name(self) -> str:
        if isinstance(self.target, str):
            return self.target
        return object_path(self.target) or self.target.__qualname__

    def resolve(self) -> type:
        """
        Resolve the class and check the method exists.

        Raises:
            DispatchFailure: Class or method not found
        """
        cls: Any = self.target
        if isinstance(cls, str):
            try:
                cls = import_object(cls)
            except (ImportError, AttributeError) as e:
                raise DispatchFailure(f"Class {self.target} not found") from e
        if not isinstance(cls, type):
            raise DispatchFailure(f"Class {self.class_name} not found")
        if not callable(getattr(cls, self.method, None)):
            raise DispatchFailure(f"Method {self.class_name}.{self.method}() not found")
        return cls

    def to_config(self) -> dict[str, Any]:
        return {
            "class": [self.class_name, list(self.args), self.method, list(self.method_args)]
        }


WorkItem = ShellCommand | FunctionCall | ClassMethodCall


def _class_from_mapping(spec: Mapping[Any, Any]) -> ClassMethodCall:
    # {cls: ctor_args} or {cls: ctor_args, method: method_args}
    items = list(spec.items())
    if not items or len(items) > 2:
        raise ConfigError("'class' mapping must be {class: args} or {class: args, method: args}")
    target, args = items[0]
    method, method_args = items[1] if len(items) == 2 else (DEFAULT_METHOD, ())
    return _class_call(target, args, method, method_args)


def _class_from_sequence(spec: list | tuple) -> ClassMethodCall:
    # [cls, ctor_args?, method?, method_args?]
    if not spec or len(spec) > 4:
        raise ConfigError("'class' sequence must be [class, args?, method?, method_args?]")
    target = spec[0]
    args = spec[1] if len(spec) > 1 else ()
    method = spec[2] if len(spec) > 2 else DEFAULT_METHOD
    method_args = spec[3] if len(spec) > 3 else ()
    return _class_call(target, args, method, method_args)


def _class_call(target: Any, args: Any, method: Any, method_args: Any) -> ClassMethodCall:
    if not isinstance(target, (str, type)):
        raise ConfigError(f"'class' target must be an import path or a class, got {target!r}")
    if not isinstance(method, str) or not method:
        raise ConfigError(f"Method name must be a non-empty string, got {method!r}")
    return ClassMethodCall(
        target=target,
        args=_as_args(args),
        method=method,
        method_args=_as_args(method_args),
    )


def build_work_item(job: str, config: Mapping[str, Any]) -> WorkItem:
    """
    Resolve the work item of a job configuration.

    Exactly one of ``command``, ``function`` or ``class`` must be set. A callable
    given as ``command`` is treated as ``function``.

    Raises:
        ConfigError: None or more than one work item is configured
    """
    present = [key for key in WORK_KEYS if config.get(key) is not None]
    if len(present) != 1:
        raise ConfigError(f"Either 'command' or 'function' or 'class' is required for '{job}' job")

    key = present[0]
    value = config[key]

    if key == "command" and callable(value):
        key = "function"

    if key == "command":
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"'command' must be a non-empty string for '{job}' job")
        return ShellCommand(command=value)

    if key == "function":
        if isinstance(value, str):
            return FunctionCall(target=value)
        if not callable(value):
            raise ConfigError(f"'function' must be callable or an import path for '{job}' job")
        return FunctionCall(target=object_path(value) or value)

    if isinstance(value, Mapping):
        return _class_from_mapping(value)
    if isinstance(value, (list, tuple)):
        return _class_from_sequence(value)
    return _class_call(value, (), DEFAULT_METHOD, ())
