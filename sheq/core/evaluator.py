"""Tree-walking evaluator for SHEQ: one rule per node kind, strict (call-by-value), lexically scoped.

The current environment is always passed in explicitly. Closures extend the environment they were defined in, never
the caller's. There is no tail-call optimization: every nested application costs Python stack depth, and running out
of it surfaces as a RecursionError, which ErrorHandler reports as a resource failure.
"""

from sheq.core.environment import Environment
from sheq.core.primitives import apply_primitive
from sheq.core.tree import Application, Identifier, If, Lambda, Number, String
from sheq.core.values import BooleanValue, Closure, NumberValue, Primitive, StringValue, serialize
from sheq.lang.error import ArityError, GenericException, TypeMismatch


def interp(node, env, arena):
    """Evaluates node in env, allocating any new values in arena. Returns a Value."""
    if isinstance(node, Number):
        return NumberValue.make(arena, node.value)

    elif isinstance(node, String):
        return StringValue.make(arena, node.data)

    elif isinstance(node, Identifier):
        return env.resolve(node.name)

    elif isinstance(node, If):
        test = interp(node.test, env, arena)
        if not isinstance(test, BooleanValue):
            raise TypeMismatch("if expects a boolean test, got a {} ({})", (test.type_name, serialize(test)))
        return interp(node.then if test.value else node.orelse, env, arena)

    elif isinstance(node, Lambda):
        return Closure.make(arena, node.params, node.body, env)

    elif isinstance(node, Application):
        func = interp(node.operator, env, arena)
        args = [interp(operand, env, arena) for operand in node.operands]
        return apply(func, args, arena)

    raise GenericException("unknown node type '{}'", type(node).__name__, internal=True)


def apply(func, args, arena):
    """Applies an evaluated operator to evaluated arguments."""
    if isinstance(func, Closure):
        if len(func.params) != len(args):
            plural = "argument" if len(func.params) == 1 else "arguments"
            raise ArityError("closure expects {} {}, got {}", (len(func.params), plural, len(args)))

        # extend the closure's captured env, not the call-site env
        call_env = Environment.extend(arena, func.env, func.params, args)
        return interp(func.body, call_env, arena)

    elif isinstance(func, Primitive):
        return apply_primitive(func.op, args, arena)

    raise TypeMismatch("cannot apply a {} ({})", (func.type_name, serialize(func)))
