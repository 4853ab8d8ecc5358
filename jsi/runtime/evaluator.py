"""Tree-walking evaluator for jsi.

Statements are executed with `execute`, which returns a Completion: how the statement ended (normally, by `return`
or by `break`) and the value it produced. Blocks stop at the first Completion that is not normal and hand it to their
caller; `while` loops consume BREAK, function calls consume RETURN. Expressions are evaluated with `evaluate`, which
returns a plain value.

Both dispatch on the node class with a match statement covering the whole node set; anything else is an internal
error.
"""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any

from jsi.grammar import nodes
from jsi.lang.error import GenericException, UserThrow
from jsi.runtime.scope import Environment
from jsi.runtime.values import (UNDEFINED, Closure, JSArray, JSObject, add, call_value, get_member, less_than,
                                logical_not, multiply, negate, set_member, strict_equals, to_boolean,
                                to_display, to_property_key)


class Signal(Enum):
    NORMAL = "normal"
    RETURN = "return"
    BREAK = "break"


@dataclass(frozen=True)
class Completion:
    """Result of executing a statement."""
    signal: Signal = Signal.NORMAL
    value: Any = UNDEFINED

    @property
    def abrupt(self):
        return self.signal is not Signal.NORMAL


NORMAL = Completion()
BREAK = Completion(Signal.BREAK)

# every interpreted call costs about seven Python frames
RECURSION_LIMIT = 10000


def describe(node):
    """Short source-like description of an expression, used in error messages."""
    match node:
        case nodes.Name(name=name):
            return name
        case nodes.Ref(expr=expr, index=nodes.Lit(value=str() as key)):
            return f"{describe(expr)}.{key}"
        case nodes.Ref(expr=expr):
            return f"{describe(expr)}[...]"
        case nodes.Inv(expr=expr):
            return f"{describe(expr)}(...)"
        case nodes.Lit(value=value):
            return to_display(value, True)
        case nodes.Function():
            return "function"
        case _:
            return "expression"


class Evaluator:
    """Runs ASTs against Environments. root is the root Environment, whose bindings (the host capability object) are
    the receiver of plain function calls.
    """

    def __init__(self, root):
        self.root = root

        if sys.getrecursionlimit() < RECURSION_LIMIT:
            sys.setrecursionlimit(RECURSION_LIMIT)

    def run(self, block, scope=None):
        """Executes a program (a Block) in scope, a fresh child of root by default. Returns the value of a top-level
        `return`, or else the value of the last statement executed.
        """
        if scope is None:
            scope = self.root.child()
        return self.execute(block, scope).value

    # ------------statements-----------------------------------------------------------------------------------------

    def execute(self, node, env):
        match node:
            case nodes.Block(stmts=stmts):
                completion = NORMAL
                for stmt in stmts:
                    completion = self.execute(stmt, env)
                    if completion.abrupt:
                        break
                return completion

            case nodes.Var(name=name, expr=expr):
                env.declare(name, UNDEFINED if expr is None else self.evaluate(expr, env))
                return NORMAL

            case nodes.If(cond=cond, then_body=then_body, else_body=else_body):
                if to_boolean(self.evaluate(cond, env)):
                    return self.execute(then_body, env)
                if else_body is not None:
                    return self.execute(else_body, env)
                return NORMAL

            case nodes.While(cond=cond, body=body):
                while to_boolean(self.evaluate(cond, env)):
                    completion = self.execute(body, env)
                    if completion.signal is Signal.RETURN:
                        return completion
                    if completion.signal is Signal.BREAK:
                        break
                return NORMAL

            case nodes.Break():
                return BREAK

            case nodes.Throw(expr=expr):
                raise UserThrow(self.evaluate(expr, env))

            case nodes.Return(expr=expr):
                return Completion(Signal.RETURN, UNDEFINED if expr is None else self.evaluate(expr, env))

            case nodes.Stmt(expr=expr):
                return Completion(value=self.evaluate(expr, env))

            case nodes.Set(target=target, expr=expr):
                return Completion(value=self.assign(target, self.evaluate(expr, env), env))

            case _:
                raise GenericException("'{}' is not a statement", type(node).__name__, internal=True)

    def assign(self, target, value, env):
        """Writes value to target (a Name or a Ref) and returns it."""
        match target:
            case nodes.Name(name=name):
                return env.assign(name, value)
            case nodes.Ref(expr=expr, index=index):
                obj = self.evaluate(expr, env)
                return set_member(obj, self.evaluate(index, env), value)
            case _:
                raise GenericException("cannot assign to '{}'", type(target).__name__, internal=True)

    # ------------expressions----------------------------------------------------------------------------------------

    def evaluate(self, node, env):
        match node:
            case nodes.Lit(value=value):
                return value

            case nodes.Name(name=name):
                return env.lookup(name)

            case nodes.Function():
                return Closure(node, env, self)

            case nodes.Eq(left=left, right=right):
                return strict_equals(self.evaluate(left, env), self.evaluate(right, env))

            case nodes.Lt(left=left, right=right):
                return less_than(self.evaluate(left, env), self.evaluate(right, env))

            case nodes.Add(left=left, right=right):
                return add(self.evaluate(left, env), self.evaluate(right, env))

            case nodes.Mul(left=left, right=right):
                return multiply(self.evaluate(left, env), self.evaluate(right, env))

            case nodes.Neg(expr=expr):
                return negate(self.evaluate(expr, env))

            case nodes.Not(expr=expr):
                return logical_not(self.evaluate(expr, env))

            case nodes.Ref(expr=expr, index=index):
                obj = self.evaluate(expr, env)
                return get_member(obj, self.evaluate(index, env))

            case nodes.Inv(expr=nodes.Ref(expr=expr, index=index) as callee, args=args):
                this = self.evaluate(expr, env)
                func = get_member(this, self.evaluate(index, env))
                values = [self.evaluate(arg, env) for arg in args]
                return call_value(func, this, values, describe(callee))

            case nodes.Inv(expr=callee, args=args):
                func = self.evaluate(callee, env)
                values = [self.evaluate(arg, env) for arg in args]
                return call_value(func, self.root.bindings, values, describe(callee))

            case nodes.Array(items=items):
                return JSArray(self.evaluate(item, env) for item in items)

            case nodes.Object(pairs=pairs):
                obj = JSObject()
                for key, value in pairs:
                    obj[to_property_key(self.evaluate(key, env))] = self.evaluate(value, env)
                return obj

            case _:
                raise GenericException("'{}' is not an expression", type(node).__name__, internal=True)

    # ------------calls----------------------------------------------------------------------------------------------

    def call(self, closure, this, args):
        """Invokes closure: one new Environment under the captured one holding `this`, `arguments` and the
        parameters (missing arguments are undefined). Returns the `return` value, or undefined.
        """
        env = Environment(closure.scope)
        env.declare("this", this)
        env.declare("arguments", JSArray(args))
        for idx, param in enumerate(closure.node.params):
            env.declare(param, args[idx] if idx < len(args) else UNDEFINED)

        completion = self.execute(closure.node.body, env)
        if completion.signal is Signal.RETURN:
            return completion.value
        return UNDEFINED
