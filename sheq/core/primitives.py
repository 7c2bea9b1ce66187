"""Built-in operations of SHEQ, bound into the root environment before the user's expression is evaluated.

The set of primitives is closed: Op enumerates them and apply_primitive() dispatches on it. Every primitive checks
its argument count, then its argument types, before computing anything.
"""

from enum import Enum
import math

from sheq.core.environment import Environment
from sheq.core.values import BooleanValue, Closure, NumberValue, Primitive, StringValue, serialize
from sheq.lang.error import ArityError, DomainError, GenericException, TypeMismatch, UserError


class Op(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    LEQ = "<="
    EQUAL = "equal?"
    SUBSTRING = "substring"
    STRLEN = "strlen"
    ERROR = "error"


def check_arity(op, args, count):
    if len(args) != count:
        plural = "argument" if count == 1 else "arguments"
        raise ArityError("{} expects {} {}, got {}", (op.value, count, plural, len(args)))


def check_type(op, value, want, position):
    if not isinstance(value, want):
        msg = "{} expects a {} as argument {}, got a {} ({})"
        raise TypeMismatch(msg, (op.value, want.type_name, position, value.type_name, serialize(value)))
    return value


def _numbers(op, args):
    check_arity(op, args, 2)
    return [check_type(op, arg, NumberValue, idx + 1).value for idx, arg in enumerate(args)]


def _arithmetic(op, args, arena):
    lhs, rhs = _numbers(op, args)

    if op is Op.ADD:
        result = lhs + rhs
    elif op is Op.SUB:
        result = lhs - rhs
    elif op is Op.MUL:
        result = lhs * rhs
    else:
        if rhs == 0.0:
            raise DomainError("division by zero: {} / {}", (serialize(args[0]), serialize(args[1])))
        result = lhs / rhs

    return NumberValue.make(arena, result)


def _leq(op, args, arena):
    lhs, rhs = _numbers(op, args)
    return BooleanValue.make(arena, lhs <= rhs)


def values_equal(lhs, rhs):
    """Structural equality: numbers by value, strings by length and bytes, booleans by value. Closures and primitives
    are never equal to anything, including themselves.
    """
    if type(lhs) is not type(rhs) or isinstance(lhs, (Closure, Primitive)):
        return False
    elif isinstance(lhs, StringValue):
        return len(lhs.data) == len(rhs.data) and lhs.data == rhs.data
    return lhs.value == rhs.value


def _equal(op, args, arena):
    check_arity(op, args, 2)
    return BooleanValue.make(arena, values_equal(*args))


def _index(op, value, what):
    """Truncates a numeric index toward zero, as long as it is finite."""
    if not math.isfinite(value):
        raise DomainError("{} {} {} is not a finite index", (op.value, what, format(value, ".15g")))
    return int(value)


def _substring(op, args, arena):
    check_arity(op, args, 3)
    string = check_type(op, args[0], StringValue, 1).data
    start = check_type(op, args[1], NumberValue, 2).value
    stop = check_type(op, args[2], NumberValue, 3).value

    start = _index(op, start, "start")
    stop = _index(op, stop, "stop")

    if not 0 <= start <= len(string):
        raise DomainError("{} start {} is out of bounds [0, {}]", (op.value, start, len(string)))
    if not start <= stop <= len(string):
        raise DomainError("{} stop {} is out of bounds [{}, {}]", (op.value, stop, start, len(string)))

    return StringValue.make(arena, string[start:stop])


def _strlen(op, args, arena):
    check_arity(op, args, 1)
    string = check_type(op, args[0], StringValue, 1).data
    return NumberValue.make(arena, float(len(string)))


def _error(op, args, arena):
    check_arity(op, args, 1)
    raise UserError("{}", serialize(args[0]))


IMPLEMENTATIONS = {
    Op.ADD: _arithmetic,
    Op.SUB: _arithmetic,
    Op.MUL: _arithmetic,
    Op.DIV: _arithmetic,
    Op.LEQ: _leq,
    Op.EQUAL: _equal,
    Op.SUBSTRING: _substring,
    Op.STRLEN: _strlen,
    Op.ERROR: _error,
}


def apply_primitive(op, args, arena):
    """Invokes the built-in op on already-evaluated args. Never builds an environment frame."""
    try:
        implementation = IMPLEMENTATIONS[op]
    except KeyError:
        raise GenericException("unknown primitive '{}'", op, internal=True)
    return implementation(op, args, arena)


def make_top_env(arena):
    """Returns the root environment: every primitive, plus true and false."""
    env = Environment.create(arena)

    for op in Op:
        env.bind(arena, op.value, Primitive.make(arena, op))

    env.bind(arena, "true", BooleanValue.make(arena, True))
    env.bind(arena, "false", BooleanValue.make(arena, False))

    return env
