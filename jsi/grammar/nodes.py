"""Abstract syntax tree for jsi. The node set is closed: every construct the parser can produce is one of the
classes below, and each carries its tag (the construct's short name) in TAG.

Statements:  block, var, function, if, while, break, throw, return, stmt, set
Expressions: eq, lt, add, mul, neg, not, lit, name, ref, inv, array, object (and function)

Nodes are frozen once built. Sequences of children are tuples.
"""

from dataclasses import dataclass, fields
from typing import Any, Optional, Tuple


class Node:
    """Superclass of every AST node."""
    TAG = None

    def display(self, indents=0):
        """Recursively displays the tree rooted at self in a readable format.

        Format:
        <Node>(
            <field>=<Node>(...),
            <field>=[
                <Node>(...),
            ],
            <field>=<value>,
        )
        """
        pad = "    " * (indents + 1)
        result = f"{type(self).__name__}("
        children = []
        for field in fields(self):
            value = getattr(self, field.name)
            if isinstance(value, Node):
                children.append(f"{pad}{field.name}={value.display(indents + 1)}")
            elif isinstance(value, tuple) and value and not isinstance(value[0], str):
                items = ""
                for item in value:
                    if isinstance(item, tuple):  # object literal pair
                        item = ": ".join(node.display(indents + 2) for node in item)
                    else:
                        item = item.display(indents + 2)
                    items += f"{pad}    {item},\n"
                children.append(f"{pad}{field.name}=[\n{items}{pad}]")
            else:
                children.append(f"{pad}{field.name}={value!r}")

        if not children:
            return result + ")"
        return result + "\n" + ",\n".join(children) + "\n" + "    " * indents + ")"


# ------------statements---------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class Block(Node):
    TAG = "block"
    stmts: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class Var(Node):
    TAG = "var"
    name: str
    expr: Optional[Node] = None


@dataclass(frozen=True)
class Function(Node):
    """Function literal. Evaluating one creates a closure; the node itself is never called."""
    TAG = "function"
    name: Optional[str]
    params: Tuple[str, ...]
    body: Block


@dataclass(frozen=True)
class If(Node):
    TAG = "if"
    cond: Node
    then_body: Block
    else_body: Optional[Block] = None


@dataclass(frozen=True)
class While(Node):
    TAG = "while"
    cond: Node
    body: Block


@dataclass(frozen=True)
class Break(Node):
    TAG = "break"


@dataclass(frozen=True)
class Throw(Node):
    TAG = "throw"
    expr: Node


@dataclass(frozen=True)
class Return(Node):
    TAG = "return"
    expr: Optional[Node] = None


@dataclass(frozen=True)
class Stmt(Node):
    """Bare expression statement."""
    TAG = "stmt"
    expr: Node


@dataclass(frozen=True)
class Set(Node):
    """Assignment. target is a Name or a Ref."""
    TAG = "set"
    target: Node
    expr: Node


# ------------expressions--------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class Eq(Node):
    TAG = "eq"
    left: Node
    right: Node


@dataclass(frozen=True)
class Lt(Node):
    TAG = "lt"
    left: Node
    right: Node


@dataclass(frozen=True)
class Add(Node):
    TAG = "add"
    left: Node
    right: Node


@dataclass(frozen=True)
class Mul(Node):
    TAG = "mul"
    left: Node
    right: Node


@dataclass(frozen=True)
class Neg(Node):
    TAG = "neg"
    expr: Node


@dataclass(frozen=True)
class Not(Node):
    TAG = "not"
    expr: Node


@dataclass(frozen=True)
class Lit(Node):
    """Literal: float, str, bool, None (null) or a compiled JSRegExp."""
    TAG = "lit"
    value: Any


@dataclass(frozen=True)
class Name(Node):
    TAG = "name"
    name: str


@dataclass(frozen=True)
class Ref(Node):
    """Member access. Both `a.b` and `a["b"]` produce a Ref; for the former, index is Lit("b")."""
    TAG = "ref"
    expr: Node
    index: Node


@dataclass(frozen=True)
class Inv(Node):
    TAG = "inv"
    expr: Node
    args: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class Array(Node):
    TAG = "array"
    items: Tuple[Node, ...] = ()


@dataclass(frozen=True)
class Object(Node):
    """Object literal: ordered (key, value) expression pairs. Bare identifier keys are already Lit strings."""
    TAG = "object"
    pairs: Tuple[Tuple[Node, Node], ...] = ()
