"""
Predicate expressions over signal sets.

Predicates are a small fixed grammar: comparison atoms ``(key, op, literal)``
composed with all-of / any-of / not. Evaluation is pure and total:

- an atom whose key is missing from the signal set is False
- an atom comparing incompatible types (a string against a number, a bool
  against a number) is False
- all-of and any-of short-circuit; an empty all-of is True, an empty any-of
  is False
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Union

from ..errors import MalformedDescriptorError
from .models import SignalSet, SignalValue


class Comparator(str, Enum):
    """Comparison operators available to predicate atoms."""
    EQ = "=="
    NE = "!="
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    IN = "in"


ORDERING_COMPARATORS = (Comparator.GT, Comparator.GE, Comparator.LT, Comparator.LE)


@dataclass(frozen=True)
class Constant:
    """Predicate with a fixed truth value."""
    value: bool


ALWAYS = Constant(True)
NEVER = Constant(False)


@dataclass(frozen=True)
class Comparison:
    """Atom comparing one signal against a literal."""
    key: str
    op: Comparator
    literal: Any


@dataclass(frozen=True)
class AllOf:
    operands: tuple


@dataclass(frozen=True)
class AnyOf:
    operands: tuple


@dataclass(frozen=True)
class Not:
    operand: "Predicate"


Predicate = Union[Constant, Comparison, AllOf, AnyOf, Not]


def _kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "num"
    if isinstance(value, str):
        return "str"
    return "other"


def _compare(value: SignalValue, op: Comparator, literal: Any) -> bool:
    if op is Comparator.IN:
        return any(_kind(value) == _kind(item) and value == item for item in literal)

    if _kind(value) != _kind(literal):
        return False

    if op is Comparator.EQ:
        return value == literal
    if op is Comparator.NE:
        return value != literal

    # Booleans are equality-only
    if _kind(value) == "bool":
        return False
    if op is Comparator.GT:
        return value > literal
    if op is Comparator.GE:
        return value >= literal
    if op is Comparator.LT:
        return value < literal
    return value <= literal


def evaluate(predicate: Predicate, signals: SignalSet) -> bool:
    """Evaluate a predicate against a signal set."""
    if isinstance(predicate, Constant):
        return predicate.value
    if isinstance(predicate, Comparison):
        if predicate.key not in signals:
            return False
        return _compare(signals[predicate.key], predicate.op, predicate.literal)
    if isinstance(predicate, AllOf):
        return all(evaluate(operand, signals) for operand in predicate.operands)
    if isinstance(predicate, AnyOf):
        return any(evaluate(operand, signals) for operand in predicate.operands)
    if isinstance(predicate, Not):
        return not evaluate(predicate.operand, signals)
    raise TypeError(f"Unsupported predicate node: {type(predicate).__name__}")


def referenced_keys(predicate: Predicate) -> list[str]:
    """Signal keys read by a predicate, in first-seen order."""
    seen: dict[str, None] = {}
    for atom in _atoms(predicate):
        seen.setdefault(atom.key, None)
    return list(seen)


def _atoms(predicate: Predicate) -> Iterator[Comparison]:
    if isinstance(predicate, Comparison):
        yield predicate
    elif isinstance(predicate, (AllOf, AnyOf)):
        for operand in predicate.operands:
            yield from _atoms(operand)
    elif isinstance(predicate, Not):
        yield from _atoms(predicate.operand)


def comparison(key: str, op: Union[str, Comparator], literal: Any) -> Comparison:
    """Build a comparison atom, validating the operator and literal."""
    try:
        comparator = Comparator(op)
    except ValueError:
        raise MalformedDescriptorError(
            f"Unknown comparator {op!r} for signal {key!r}",
            descriptor={"key": key, "op": op, "value": literal}
        ) from None

    if comparator is Comparator.IN:
        if not isinstance(literal, (list, tuple)) or any(_kind(item) == "other" for item in literal):
            raise MalformedDescriptorError(
                f"'in' comparison on {key!r} needs a list of scalar literals",
                descriptor={"key": key, "op": op, "value": literal}
            )
        literal = tuple(literal)
    elif _kind(literal) == "other":
        raise MalformedDescriptorError(
            f"Literal for {key!r} must be a bool, number or string, got {literal!r}",
            descriptor={"key": key, "op": op, "value": literal}
        )
    elif comparator in ORDERING_COMPARATORS and _kind(literal) == "bool":
        raise MalformedDescriptorError(
            f"Ordering comparison on {key!r} cannot use a boolean literal",
            descriptor={"key": key, "op": op, "value": literal}
        )

    return Comparison(key=key, op=comparator, literal=literal)


def all_of(*operands: Predicate) -> AllOf:
    return AllOf(tuple(operands))


def any_of(*operands: Predicate) -> AnyOf:
    return AnyOf(tuple(operands))


def not_(operand: Predicate) -> Not:
    return Not(operand)


def parse_predicate(descriptor: Any) -> Predicate:
    """
    Parse a predicate descriptor.

    Accepted forms::

        true / false / None
        {"key": "locCount", "op": ">", "value": 10000}
        {"all": [...]} / {"any": [...]} / {"not": {...}}

    Raises:
        MalformedDescriptorError: if the descriptor has any other shape
    """
    if descriptor is None or descriptor is True:
        return ALWAYS
    if descriptor is False:
        return NEVER
    if not isinstance(descriptor, dict):
        raise MalformedDescriptorError(
            f"Predicate must be a mapping or boolean, got {type(descriptor).__name__}",
            descriptor=descriptor
        )

    if "all" in descriptor or "any" in descriptor:
        combinator = "all" if "all" in descriptor else "any"
        operands = descriptor[combinator]
        if len(descriptor) != 1 or not isinstance(operands, list):
            raise MalformedDescriptorError(
                f"'{combinator}' predicate must be the only field and hold a list",
                descriptor=descriptor
            )
        parsed = tuple(parse_predicate(operand) for operand in operands)
        return AllOf(parsed) if combinator == "all" else AnyOf(parsed)

    if "not" in descriptor:
        if len(descriptor) != 1:
            raise MalformedDescriptorError("'not' predicate must be the only field", descriptor=descriptor)
        return Not(parse_predicate(descriptor["not"]))

    if set(descriptor) == {"key", "op", "value"}:
        key = descriptor["key"]
        if not isinstance(key, str) or not key:
            raise MalformedDescriptorError("Predicate key must be a non-empty string", descriptor=descriptor)
        return comparison(key, descriptor["op"], descriptor["value"])

    raise MalformedDescriptorError(
        f"Unrecognized predicate fields: {sorted(descriptor)}",
        descriptor=descriptor
    )


def describe(predicate: Predicate) -> Any:
    """Render a predicate back into descriptor form."""
    if isinstance(predicate, Constant):
        return predicate.value
    if isinstance(predicate, Comparison):
        literal = list(predicate.literal) if predicate.op is Comparator.IN else predicate.literal
        return {"key": predicate.key, "op": predicate.op.value, "value": literal}
    if isinstance(predicate, AllOf):
        return {"all": [describe(operand) for operand in predicate.operands]}
    if isinstance(predicate, AnyOf):
        return {"any": [describe(operand) for operand in predicate.operands]}
    if isinstance(predicate, Not):
        return {"not": describe(predicate.operand)}
    raise TypeError(f"Unsupported predicate node: {type(predicate).__name__}")
