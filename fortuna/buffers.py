"""Byte-buffer helpers shared by the generator, pools and combiner."""

from __future__ import annotations

from fortuna.errors import IndexOutOfRangeError, InvalidArgumentError


def byte_view(data, *, writable: bool = False) -> memoryview:
    """Return a flat unsigned-byte ``memoryview`` over *data*.

    Accepts anything exposing the buffer protocol (``bytes``, ``bytearray``,
    ``memoryview``, contiguous numpy arrays).
    """
    if data is None:
        raise InvalidArgumentError("buffer must not be None")
    if isinstance(data, str):
        raise InvalidArgumentError("expected a bytes-like object, got str")
    try:
        view = memoryview(data)
    except TypeError as e:
        raise InvalidArgumentError(f"expected a bytes-like object, got {type(data).__name__}") from e
    if writable and view.readonly:
        raise InvalidArgumentError("buffer is read-only")
    if view.format != "B" or view.ndim != 1:
        try:
            view = view.cast("B")
        except TypeError as e:
            raise InvalidArgumentError("buffer must be C-contiguous") from e
    if not view.c_contiguous:
        raise InvalidArgumentError("buffer must be C-contiguous")
    return view


def check_range(view: memoryview, offset: int, length: int | None) -> int:
    """Validate *offset* / *length* against *view* and return the length.

    ``length=None`` means "to the end of the buffer".  Offsets outside
    ``[0, len(view)]`` raise ``IndexOutOfRangeError``; a negative length or
    one that runs past the end raises ``InvalidArgumentError``.
    """
    size = len(view)
    if isinstance(offset, bool) or not isinstance(offset, int):
        raise InvalidArgumentError(f"offset must be an int, not {offset!r}")
    if offset < 0 or offset > size:
        raise IndexOutOfRangeError(f"offset {offset!r} outside buffer of {size} bytes")
    if length is None:
        return size - offset
    if isinstance(length, bool) or not isinstance(length, int) or length < 0 or length > size - offset:
        raise InvalidArgumentError(
            f"length {length!r} invalid for buffer of {size} bytes at offset {offset}"
        )
    return length
