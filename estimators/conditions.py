"""
Input visibility conditions.

Calculator inputs can be shown only when other inputs hold certain values
(e.g. a deductible-expenses field only for the ordinary tax regime). A
condition is one of a closed set of typed kinds, discriminated by ``kind``,
and is evaluated against the current input state.
"""

from typing import Annotated, Any, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class Equals(BaseModel):
    kind: Literal["equals"] = "equals"
    field: str
    value: Union[bool, float, str]


class NotEquals(BaseModel):
    kind: Literal["not_equals"] = "not_equals"
    field: str
    value: Union[bool, float, str]


class IsTrue(BaseModel):
    kind: Literal["is_true"] = "is_true"
    field: str


class GreaterThan(BaseModel):
    kind: Literal["greater_than"] = "greater_than"
    field: str
    value: float


class AllOf(BaseModel):
    kind: Literal["all_of"] = "all_of"
    conditions: List["Condition"]


class AnyOf(BaseModel):
    kind: Literal["any_of"] = "any_of"
    conditions: List["Condition"]


Condition = Annotated[
    Union[Equals, NotEquals, IsTrue, GreaterThan, AllOf, AnyOf],
    Field(discriminator="kind"),
]

AllOf.model_rebuild()
AnyOf.model_rebuild()

_condition_adapter = TypeAdapter(Condition)


def parse_condition(data: Mapping[str, Any]):
    """Validate a condition from its JSON form."""
    return _condition_adapter.validate_python(data)


def is_visible(condition: Optional[Condition], state: Mapping[str, Any]) -> bool:
    """
    Evaluate ``condition`` against the input ``state``.

    A missing condition means always visible. Missing fields never satisfy
    a comparison.
    """
    if condition is None:
        return True
    if isinstance(condition, AllOf):
        return all(is_visible(c, state) for c in condition.conditions)
    if isinstance(condition, AnyOf):
        return any(is_visible(c, state) for c in condition.conditions)
    if condition.field not in state:
        return False

    current = state[condition.field]
    if isinstance(condition, IsTrue):
        return current is True
    if isinstance(condition, Equals):
        return current == condition.value
    if isinstance(condition, NotEquals):
        return current != condition.value
    if isinstance(condition, GreaterThan):
        if isinstance(current, bool) or not isinstance(current, (int, float)):
            return False
        return current > condition.value
    raise TypeError(f"unsupported condition {type(condition).__name__}")


def visible_fields(
    conditions: Mapping[str, Optional[Condition]], state: Mapping[str, Any]
) -> List[str]:
    """Names of the inputs whose condition holds, in declaration order."""
    return [name for name, condition in conditions.items() if is_visible(condition, state)]
