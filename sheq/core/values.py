"""Runtime values of SHEQ and their one-line text serialization.

```
<Value> ::= NumberValue(value)              ; float
          | StringValue(data)               ; bytes
          | BooleanValue(value)
          | Closure(params, body, env)      ; env is the defining environment, never the caller's
          | Primitive(op)                   ; op is a member of primitives.Op
```
"""

from dataclasses import dataclass, field
from typing import Any, Tuple

from sheq.core.arena import VALUE_SIZE, align_up
from sheq.lang.error import GenericException


@dataclass(frozen=True)
class Value:
    """Superclass for all runtime values. handle is the value's allocation in its arena."""
    handle: int = field(default=-1, repr=False, compare=False, kw_only=True)
    type_name = "value"

    @classmethod
    def payload(cls, *fields):
        return 0

    @classmethod
    def make(cls, arena, *fields):
        """Allocates a value in arena and returns it."""
        handle = arena.allocate(VALUE_SIZE + cls.payload(*fields))
        return cls(*fields, handle=handle)


@dataclass(frozen=True)
class NumberValue(Value):
    value: float
    type_name = "number"


@dataclass(frozen=True)
class StringValue(Value):
    data: bytes
    type_name = "string"

    @classmethod
    def payload(cls, data):
        return align_up(len(data) + 1)


@dataclass(frozen=True)
class BooleanValue(Value):
    value: bool
    type_name = "boolean"


# closures and primitives have identity only: equal? never considers them equal
@dataclass(frozen=True, eq=False)
class Closure(Value):
    params: Tuple[str, ...]
    body: Any
    env: Any
    type_name = "closure"

    __eq__ = object.__eq__
    __hash__ = object.__hash__


@dataclass(frozen=True, eq=False)
class Primitive(Value):
    op: Any
    type_name = "primitive"

    __eq__ = object.__eq__
    __hash__ = object.__hash__


def serialize(value):
    """Returns the one-line text form of value. Output is never truncated."""
    if isinstance(value, NumberValue):
        return format(value.value, ".15g")

    elif isinstance(value, StringValue):
        text = value.data.decode("utf-8", errors="surrogateescape")
        return "\"" + text.replace("\\", "\\\\").replace("\"", "\\\"").replace("\n", "\\n") + "\""

    elif isinstance(value, BooleanValue):
        return "true" if value.value else "false"

    elif isinstance(value, Closure):
        return "#<procedure>"

    elif isinstance(value, Primitive):
        return "#<primop>"

    raise GenericException("cannot serialize '{}'", repr(value), internal=True)
