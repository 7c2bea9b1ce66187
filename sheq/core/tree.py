"""Abstract syntax tree for SHEQ. Formally,

```
<Node> ::= Number(value)                    ; float literal
         | String(data)                     ; bytes, explicit length (NULs allowed)
         | Identifier(name)
         | If(test, then, orelse)
         | Lambda(params, body)             ; params: tuple of distinct, non-keyword names
         | Application(children)            ; children[0] is the operator, the rest are arguments
```

Nodes are frozen once built and only ever point at nodes built before them, so a tree is a DAG and never a cycle.
Every node is charged against the arena it was made in: use the make() constructors rather than instantiating
directly.
"""

from dataclasses import dataclass, field
from typing import Tuple

from sheq.core.arena import NODE_SIZE, align_up


@dataclass(frozen=True)
class Node:
    """Superclass for all AST nodes. handle is the node's allocation in its arena."""
    handle: int = field(default=-1, repr=False, compare=False, kw_only=True)

    @classmethod
    def payload(cls, *fields):
        """Bytes a node needs beyond NODE_SIZE: names, string data and child arrays."""
        return 0

    @classmethod
    def make(cls, arena, *fields):
        """Allocates a node in arena and returns it."""
        handle = arena.allocate(NODE_SIZE + cls.payload(*fields))
        return cls(*fields, handle=handle)

    @property
    def children(self):
        return ()

    def walk(self):
        """Yields this node and all of its descendants, depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass(frozen=True)
class Number(Node):
    value: float


@dataclass(frozen=True)
class String(Node):
    data: bytes

    @classmethod
    def payload(cls, data):
        return align_up(len(data) + 1)


@dataclass(frozen=True)
class Identifier(Node):
    name: str

    @classmethod
    def payload(cls, name):
        return align_up(len(name.encode("utf-8")) + 1)


@dataclass(frozen=True)
class If(Node):
    test: Node
    then: Node
    orelse: Node

    @property
    def children(self):
        return self.test, self.then, self.orelse


@dataclass(frozen=True)
class Lambda(Node):
    params: Tuple[str, ...]
    body: Node

    @classmethod
    def payload(cls, params, body):
        return sum(8 + align_up(len(param.encode("utf-8")) + 1) for param in params)

    @property
    def children(self):
        return (self.body,)


@dataclass(frozen=True)
class Application(Node):
    nodes: Tuple[Node, ...]

    @classmethod
    def payload(cls, nodes):
        return 8 * len(nodes)

    @property
    def operator(self):
        return self.nodes[0]

    @property
    def operands(self):
        return self.nodes[1:]

    @property
    def children(self):
        return self.nodes
