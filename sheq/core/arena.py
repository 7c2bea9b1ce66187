"""Bump arena backing one SHEQ evaluation.

Storage is a single pre-sized buffer carved up by advancing an offset. Allocations are addressed by integer handles
(offsets into the buffer), are 8-byte aligned and zero-filled, and are never freed individually: the whole arena is
released at once when the evaluation ends, whether it succeeded or not.

Python objects (tokens, nodes, frames, values) live on the ordinary heap, but each one is charged against the arena
when it is built, so an evaluation is bounded by the arena's capacity exactly as if the objects lived inside it.
"""

from sheq.lang.error import ArenaExhausted, GenericException


ALIGNMENT = 8

# footprints charged per object, mirroring a 64-bit struct layout
TOKEN_SIZE = 24
NODE_SIZE = 32
VALUE_SIZE = 40
FRAME_SIZE = 16
BINDING_SIZE = 56


def align_up(size, align=ALIGNMENT):
    return ((size + align - 1) // align) * align


class Arena:
    """Fixed-capacity bump allocator. Use as a context manager to release the buffer when done."""
    DEFAULT_CAPACITY = 1024 * 1024

    def __init__(self, capacity=DEFAULT_CAPACITY):
        if capacity < 0:
            raise GenericException("arena capacity must be non-negative, got {}", capacity, internal=True)

        self.capacity = capacity
        self.offset = 0
        self._buffer = bytearray(capacity)

    @property
    def released(self):
        return self._buffer is None

    @property
    def remaining(self):
        return self.capacity - self.offset

    def allocate(self, size):
        """Returns the handle of size zero-filled bytes, 8-byte aligned. Raises ArenaExhausted if they do not fit."""
        if self.released:
            raise GenericException("allocation from a released arena", internal=True)
        if size < 0:
            raise GenericException("cannot allocate {} bytes", size, internal=True)

        handle = align_up(self.offset)
        if handle + size > self.capacity:
            msg = "arena exhausted: {} bytes requested, {} of {} in use"
            raise ArenaExhausted(msg, (size, self.offset, self.capacity))

        self._buffer[handle:handle + size] = bytes(size)
        self.offset = handle + size
        return handle

    def store(self, data):
        """Copies data (bytes) into a fresh NUL-terminated allocation and returns its handle."""
        handle = self.allocate(len(data) + 1)
        self._buffer[handle:handle + len(data)] = data
        return handle

    def view(self, handle, size):
        """Read-only view of size bytes at handle. The range must lie within what has been allocated."""
        if self.released:
            raise GenericException("view of a released arena", internal=True)
        if handle < 0 or size < 0 or handle + size > self.offset:
            raise GenericException("handle {} (+{}) is outside the arena", (handle, size), internal=True)
        return memoryview(self._buffer)[handle:handle + size].toreadonly()

    def release(self):
        """Discards the whole buffer. Nothing is freed piecewise."""
        self._buffer = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False

    def __repr__(self):
        return f"Arena(offset={self.offset}, capacity={self.capacity})"
