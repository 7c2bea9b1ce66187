"""Lexical environments: a singly linked chain of frames, innermost first, ending at a root frame with no parent.

Each frame holds its bindings as a linked list, most recently added first. resolve() walks frames innermost-out and,
within a frame, bindings most-recent-first; the first name match wins. A frame's parent is always fully built before
the frame itself, so the chain can never loop.
"""

from dataclasses import dataclass
from typing import Any, Optional

from sheq.core.arena import BINDING_SIZE, FRAME_SIZE
from sheq.lang.error import ArityError, UnboundError


@dataclass(frozen=True)
class Binding:
    name: str
    value: Any
    next: Optional["Binding"] = None


class Environment:
    """One frame of the environment chain. Frames are created through create() or extend() only."""

    def __init__(self, parent, handle):
        self.parent = parent
        self.handle = handle
        self.bindings = None

    @classmethod
    def create(cls, arena, parent=None):
        """Builds an empty frame whose lookups fall through to parent."""
        return cls(parent, arena.allocate(FRAME_SIZE))

    @classmethod
    def extend(cls, arena, parent, names, values):
        """Builds one frame binding names[i] to values[i]. names[0] ends up at the head of the frame."""
        if len(names) != len(values):
            raise ArityError("cannot bind {} names to {} values", (len(names), len(values)))

        env = cls.create(arena, parent)
        for name, value in reversed(list(zip(names, values))):
            env.bind(arena, name, value)
        return env

    def bind(self, arena, name, value):
        """Adds name -> value to the head of this frame. Only used while a frame is being built."""
        arena.allocate(BINDING_SIZE)
        arena.store(name.encode("utf-8"))
        self.bindings = Binding(name, value, self.bindings)

    def resolve(self, name):
        """Returns the value bound to name in the innermost frame that binds it. Raises UnboundError if none does."""
        for frame in self.frames():
            binding = frame.bindings
            while binding is not None:
                if binding.name == name:
                    return binding.value
                binding = binding.next
        raise UnboundError("'{}' is not bound", name)

    def frames(self):
        """Yields this frame and then each enclosing frame, out to the root."""
        frame = self
        while frame is not None:
            yield frame
            frame = frame.parent

    def names(self):
        """Names bound directly in this frame, in lookup order."""
        names = []
        binding = self.bindings
        while binding is not None:
            names.append(binding.name)
            binding = binding.next
        return names

    def __repr__(self):
        return f"Environment(names={self.names()}, depth={sum(1 for __ in self.frames())})"
