"""Ordered, validator-gated transformation stages applied to a response payload.

A stage target may be given as:

* a callable (function, lambda, bound method, ``functools.partial``);
* the name of a registered function, a dotted import path to a function, or a
  Python builtin such as ``"len"``;
* ``"ClassName::member"`` or ``("ClassName", "member")`` / ``(SomeClass, "member")``
  where the class comes from the registry or a dotted import path;
* a class on its own, which is called with the payload like any callable.

Targets are resolved once, when the stage is registered. A target that cannot
be resolved is still stored so that running the pipeline reports it again and
passes the payload through unchanged.
"""

from __future__ import annotations

import builtins
import importlib
import inspect
import types
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Union

Validator = Union[Callable[[Any], bool], str]


def describe(target: Any) -> str:
    if isinstance(target, str):
        return target
    if isinstance(target, type):
        return target.__qualname__
    name = getattr(target, "__qualname__", None) or getattr(target, "__name__", None)
    if name:
        return str(name)
    func = getattr(target, "func", None)
    if func is not None:
        return describe(func)
    return repr(target)


@dataclass(frozen=True)
class FunctionTarget:
    name: str
    function: Callable[..., Any]

    def invoke(self, payload: Any, params: tuple[Any, ...]) -> Any:
        return self.function(payload, *params)


@dataclass(frozen=True)
class ClosureTarget:
    function: Callable[..., Any]

    @property
    def name(self) -> str:
        return describe(self.function)

    def invoke(self, payload: Any, params: tuple[Any, ...]) -> Any:
        return self.function(payload, *params)


@dataclass(frozen=True)
class StaticMethodTarget:
    cls: type
    method: str

    @property
    def name(self) -> str:
        return f"{self.cls.__qualname__}::{self.method}"

    def invoke(self, payload: Any, params: tuple[Any, ...]) -> Any:
        return getattr(self.cls, self.method)(payload, *params)


@dataclass(frozen=True)
class InstanceMethodTarget:
    cls: type
    method: str

    @property
    def name(self) -> str:
        return f"{self.cls.__qualname__}::{self.method}"

    def invoke(self, payload: Any, params: tuple[Any, ...]) -> Any:
        return getattr(self.cls(), self.method)(payload, *params)


@dataclass(frozen=True)
class UnresolvedTarget:
    name: str


CallbackTarget = Union[FunctionTarget, ClosureTarget, StaticMethodTarget, InstanceMethodTarget, UnresolvedTarget]


@dataclass(frozen=True)
class ResolvedValidator:
    name: str
    predicate: Callable[[Any], Any] | None


@dataclass(frozen=True)
class CallbackStage:
    target: CallbackTarget
    params: tuple[Any, ...] = ()
    validators: tuple[ResolvedValidator, ...] = ()


@dataclass(frozen=True)
class CallbackFailure:
    message: str
    operation: str


@dataclass(frozen=True)
class PipelineResult:
    payload: Any
    failures: tuple[CallbackFailure, ...] = ()


def _import_attribute(path: str) -> Any | None:
    module_name, _, attribute = path.rpartition(".")
    if not module_name or not attribute:
        return None
    try:
        module = importlib.import_module(module_name)
    except (ImportError, ValueError, TypeError):
        return None
    return getattr(module, attribute, None)


def _is_plain_function(target: Any) -> bool:
    if isinstance(target, types.BuiltinFunctionType):
        return True
    return (
        isinstance(target, types.FunctionType)
        and target.__name__ != "<lambda>"
        and target.__closure__ is None
    )


class TargetResolver:
    """Turns the accepted target spellings into callable stage targets."""

    def __init__(
        self,
        functions: Mapping[str, Callable[..., Any]] | None = None,
        classes: Mapping[str, type] | None = None,
    ) -> None:
        self.functions: dict[str, Callable[..., Any]] = dict(functions or {})
        self.classes: dict[str, type] = dict(classes or {})

    def lookup_function(self, name: str) -> Callable[..., Any] | None:
        if name in self.functions:
            return self.functions[name]
        if "::" in name:
            return None
        candidate = _import_attribute(name)
        if candidate is None:
            candidate = getattr(builtins, name, None)
            if not isinstance(candidate, types.BuiltinFunctionType):
                return None
        if isinstance(candidate, type) or not callable(candidate):
            return None
        return candidate

    def lookup_class(self, name: str) -> type | None:
        if name in self.classes:
            return self.classes[name]
        candidate = _import_attribute(name)
        return candidate if isinstance(candidate, type) else None

    @staticmethod
    def _class_member(cls: type, member: Any) -> CallbackTarget | None:
        if not isinstance(member, str) or not member or not hasattr(cls, member):
            return None
        raw = inspect.getattr_static(cls, member)
        if isinstance(raw, (staticmethod, classmethod)):
            return StaticMethodTarget(cls, member)
        if callable(getattr(cls, member)):
            return InstanceMethodTarget(cls, member)
        return None

    def resolve(self, target: Any, params: tuple[Any, ...]) -> tuple[CallbackTarget, tuple[Any, ...]]:
        if isinstance(target, type):
            if not params or not isinstance(params[0], str):
                return ClosureTarget(target), params
            resolved = self._class_member(target, params[0])
            if resolved is not None:
                return resolved, params[1:]
            return UnresolvedTarget(f"{describe(target)}::{params[0]}"), params

        if callable(target):
            if _is_plain_function(target):
                return FunctionTarget(describe(target), target), params
            return ClosureTarget(target), params

        if isinstance(target, str):
            function = self.lookup_function(target)
            if function is not None:
                return FunctionTarget(target, function), params

            class_name, separator, member = target.partition("::")
            rest = params
            if not separator and params:
                member, rest = params[0], params[1:]
            cls = self.lookup_class(class_name) if member else None
            if cls is not None:
                resolved = self._class_member(cls, member)
                if resolved is not None:
                    return resolved, rest

        return UnresolvedTarget(describe(target)), params

    def resolve_validator(self, validator: Validator) -> ResolvedValidator:
        if isinstance(validator, str):
            return ResolvedValidator(validator, self.lookup_function(validator))
        if callable(validator):
            return ResolvedValidator(describe(validator), validator)
        return ResolvedValidator(describe(validator), None)


def _is_empty_target(target: Any) -> bool:
    if target is None:
        return True
    if isinstance(target, (str, tuple, list)):
        return len(target) == 0
    return False


class CallbackPipeline:
    """Stages bound to one builder, run in registration order."""

    def __init__(self, resolver: TargetResolver | None = None) -> None:
        self._resolver = resolver or TargetResolver()
        self._stages: list[CallbackStage] = []
        self._pending_validators: tuple[Validator, ...] = ()

    @property
    def stages(self) -> tuple[CallbackStage, ...]:
        return tuple(self._stages)

    @property
    def pending_validators(self) -> tuple[Validator, ...]:
        return self._pending_validators

    def __len__(self) -> int:
        return len(self._stages)

    def __bool__(self) -> bool:
        return bool(self._stages)

    def register(self, target: Any = None, *params: Any) -> CallbackFailure | None:
        validators = self._pending_validators
        self._pending_validators = ()
        if _is_empty_target(target):
            return CallbackFailure("Function is empty", "register")

        resolved, params = self._resolver.resolve(target, tuple(params))
        self._stages.append(
            CallbackStage(
                target=resolved,
                params=params,
                validators=tuple(self._resolver.resolve_validator(v) for v in validators),
            )
        )
        if isinstance(resolved, UnresolvedTarget):
            return CallbackFailure(f"Failed to execute {resolved.name}", "register")
        return None

    def register_if(self, validators: Iterable[Validator] | Validator, target: Any = None, *params: Any) -> CallbackFailure | None:
        if isinstance(validators, str) or callable(validators):
            validators = (validators,)
        self._pending_validators = tuple(validators)
        return self.register(target, *params)

    @staticmethod
    def _run_stage(stage: CallbackStage, payload: Any) -> tuple[Any, CallbackFailure | None]:
        for validator in stage.validators:
            if validator.predicate is not None and not validator.predicate(payload):
                message = f"Content is not valid {validator.name}, type is {type(payload).__name__}"
                return payload, CallbackFailure(message, "run")
        if isinstance(stage.target, UnresolvedTarget):
            return payload, CallbackFailure(f"Failed to execute {stage.target.name}", "run")
        return stage.target.invoke(payload, stage.params), None

    def run(self, payload: Any, *, stop_on_failure: bool = False) -> PipelineResult:
        failures: list[CallbackFailure] = []
        for stage in self._stages:
            payload, failure = self._run_stage(stage, payload)
            if failure is None:
                continue
            failures.append(failure)
            if stop_on_failure:
                break
        return PipelineResult(payload=payload, failures=tuple(failures))
