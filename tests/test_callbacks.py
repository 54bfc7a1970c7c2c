from __future__ import annotations

import functools

import pytest

from httpchain.callbacks import (
    CallbackPipeline,
    ClosureTarget,
    FunctionTarget,
    InstanceMethodTarget,
    StaticMethodTarget,
    TargetResolver,
    UnresolvedTarget,
)


class Shout:
    def __init__(self) -> None:
        self.suffix = "!"

    def apply(self, value: str, times: int = 1) -> str:
        return value.upper() + self.suffix * times

    @staticmethod
    def wrap(value: str, left: str = "[", right: str = "]") -> str:
        return f"{left}{value}{right}"

    @classmethod
    def tag(cls, value: str) -> str:
        return f"{cls.__name__}:{value}"

    label = "not callable"


def add_suffix(value: str, suffix: str) -> str:
    return value + suffix


@pytest.fixture
def resolver() -> TargetResolver:
    return TargetResolver(
        functions={"add_suffix": add_suffix, "trim": str.strip},
        classes={"Shout": Shout},
    )


def test_run_is_left_fold_in_registration_order(resolver: TargetResolver) -> None:
    pipeline = CallbackPipeline(resolver)
    pipeline.register("trim")
    pipeline.register("add_suffix", "-a")
    pipeline.register(lambda value: value * 2)
    pipeline.register("add_suffix", "-b")

    result = pipeline.run("  x  ")

    assert result.payload == "x-ax-a-b"
    assert result.failures == ()


def test_rejected_stage_is_skipped_and_never_invoked(resolver: TargetResolver) -> None:
    calls: list[object] = []

    def spy(value: object) -> str:
        calls.append(value)
        return "changed"

    pipeline = CallbackPipeline(resolver)
    pipeline.register_if([lambda value: isinstance(value, dict)], spy)
    pipeline.register("add_suffix", "!")

    result = pipeline.run("payload")

    assert calls == []
    assert result.payload == "payload!"
    assert len(result.failures) == 1
    assert "Content is not valid" in result.failures[0].message
    assert "type is str" in result.failures[0].message


def test_validators_only_apply_to_their_own_stage(resolver: TargetResolver) -> None:
    pipeline = CallbackPipeline(resolver)
    pipeline.register_if([lambda value: False], "add_suffix", "-never")
    assert pipeline.pending_validators == ()
    pipeline.register("add_suffix", "-always")

    result = pipeline.run("v")

    assert result.payload == "v-always"
    assert [stage.validators for stage in pipeline.stages][1] == ()


def test_string_validators_resolve_through_registry() -> None:
    pipeline = CallbackPipeline(TargetResolver(functions={"is_str": lambda v: isinstance(v, str)}))
    pipeline.register_if("is_str", str.upper)

    assert pipeline.run("abc").payload == "ABC"
    assert pipeline.run(3).payload == 3


def test_class_and_member_pair_matches_qualified_name(resolver: TargetResolver) -> None:
    pair = CallbackPipeline(resolver)
    pair.register("Shout", "apply", 2)
    qualified = CallbackPipeline(resolver)
    qualified.register("Shout::apply", 2)

    assert isinstance(pair.stages[0].target, InstanceMethodTarget)
    assert pair.stages[0].params == (2,)
    assert pair.stages[0] == qualified.stages[0]
    assert pair.run("hi").payload == qualified.run("hi").payload == "HI!!"


def test_class_object_with_member_name(resolver: TargetResolver) -> None:
    pipeline = CallbackPipeline(resolver)
    pipeline.register(Shout, "wrap", "<", ">")

    assert isinstance(pipeline.stages[0].target, StaticMethodTarget)
    assert pipeline.run("x").payload == "<x>"


def test_classmethod_resolves_as_static_target(resolver: TargetResolver) -> None:
    pipeline = CallbackPipeline(resolver)
    pipeline.register("Shout::tag")

    assert pipeline.run("x").payload == "Shout:x"


def test_callables_resolve_directly(resolver: TargetResolver) -> None:
    instance = Shout()
    target, _ = resolver.resolve(instance.apply, ())
    assert isinstance(target, ClosureTarget)

    target, _ = resolver.resolve(functools.partial(add_suffix, suffix="?"), ())
    assert isinstance(target, ClosureTarget)
    assert target.invoke("a", ()) == "a?"

    target, _ = resolver.resolve(add_suffix, ())
    assert isinstance(target, FunctionTarget)

    target, _ = resolver.resolve(int, ())
    assert isinstance(target, ClosureTarget)
    assert target.invoke("42", ()) == 42


def test_builtin_and_dotted_function_names(resolver: TargetResolver) -> None:
    pipeline = CallbackPipeline(resolver)
    pipeline.register("len")
    pipeline.register("json.dumps")

    assert pipeline.run("abcd").payload == "4"


def test_unknown_name_is_a_resolution_failure(resolver: TargetResolver) -> None:
    pipeline = CallbackPipeline(resolver)

    failure = pipeline.register("no_such_function_anywhere", "x")
    assert failure is not None
    assert failure.message == "Failed to execute no_such_function_anywhere"
    assert isinstance(pipeline.stages[0].target, UnresolvedTarget)

    result = pipeline.run("payload")
    assert result.payload == "payload"
    assert result.failures[0].message == "Failed to execute no_such_function_anywhere"


def test_missing_or_non_callable_member_fails(resolver: TargetResolver) -> None:
    pipeline = CallbackPipeline(resolver)

    assert pipeline.register("Shout::missing") is not None
    assert pipeline.register("Shout", "label") is not None
    assert pipeline.register("Nope::apply") is not None
    assert len(pipeline) == 3


def test_empty_target_is_rejected_without_adding_a_stage(resolver: TargetResolver) -> None:
    pipeline = CallbackPipeline(resolver)
    pipeline.register_if(["is_string"], "")

    failure = pipeline.register()

    assert failure is not None
    assert failure.message == "Function is empty"
    assert len(pipeline) == 0
    assert pipeline.pending_validators == ()


def test_stop_on_failure_aborts_remaining_stages(resolver: TargetResolver) -> None:
    pipeline = CallbackPipeline(resolver)
    pipeline.register("unknown_stage")
    pipeline.register("add_suffix", "!")

    result = pipeline.run("x", stop_on_failure=True)

    assert result.payload == "x"
    assert len(result.failures) == 1


def test_unresolvable_validator_is_skipped(resolver: TargetResolver) -> None:
    pipeline = CallbackPipeline(resolver)
    pipeline.register_if(["no_such_validator"], "trim")

    result = pipeline.run("  x  ")

    assert result.payload == "x"
    assert result.failures == ()
