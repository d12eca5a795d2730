"""Streaming multipart/form-data reader for document uploads.

Drives python-multipart's push parser from the raw request body so that the
form is never buffered as a whole. File parts are handed out one at a time, in
order; a part must be fully read or drained before the next one is produced
(the iterator drains an unfinished part itself).

Usage:
    parts = MultipartFileStream(request.stream(), request.headers.get("content-type"))
    async for part in parts:
        content, size = await part.read(max_bytes)
"""

import logging
from collections import deque
from typing import AsyncIterator, Deque, Dict, Optional, Tuple

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

logger = logging.getLogger(__name__)

_HEADERS = "headers"
_DATA = "data"
_PART_END = "part_end"
_DONE = "done"


class MultipartFormError(Exception):
    """The request body is not a well-formed multipart/form-data stream."""
    pass


def parse_boundary(content_type: Optional[str]) -> bytes:
    """Extract the boundary from a multipart/form-data Content-Type.

    Raises:
        MultipartFormError: Not multipart/form-data or no boundary
    """
    if not content_type:
        raise MultipartFormError("Missing Content-Type header")

    media_type, params = parse_options_header(content_type)
    if media_type != b"multipart/form-data":
        raise MultipartFormError("Content-Type must be multipart/form-data")

    boundary = params.get(b"boundary")
    if not boundary:
        raise MultipartFormError("Missing multipart boundary")
    return boundary


class StreamedFilePart:
    """One file part, readable exactly once."""

    def __init__(self, stream: "MultipartFileStream", filename: str, content_type: str):
        self._stream = stream
        self.filename = filename
        self.content_type = content_type
        self.finished = False

    async def read(self, max_bytes: int) -> Tuple[bytes, int]:
        """Consume the part, retaining at most max_bytes.

        Returns:
            (content, total_size). When total_size exceeds max_bytes the
            content is empty; the excess was counted but never kept.
        """
        buffer = bytearray()
        total = 0
        async for chunk in self._chunks():
            total += len(chunk)
            if total <= max_bytes:
                buffer.extend(chunk)
            elif buffer:
                buffer = bytearray()
        return (bytes(buffer) if total <= max_bytes else b""), total

    async def drain(self) -> None:
        async for _ in self._chunks():
            pass

    async def _chunks(self) -> AsyncIterator[bytes]:
        if self.finished:
            return
        try:
            async for chunk in self._stream._part_chunks():
                yield chunk
        finally:
            self.finished = True


class MultipartFileStream:
    """Async iterator over the file parts of a multipart request body.

    Parts without a filename (plain form fields) are consumed and skipped.
    """

    def __init__(self, body: AsyncIterator[bytes], content_type: Optional[str]):
        self._body = body.__aiter__()
        self._events: Deque[Tuple[str, object]] = deque()
        self._body_exhausted = False
        self._completed = False
        self._current: Optional[StreamedFilePart] = None

        self._header_field = b""
        self._header_value = b""
        self._headers: Dict[bytes, bytes] = {}

        self._parser = MultipartParser(
            parse_boundary(content_type),
            callbacks={
                "on_part_begin": self._on_part_begin,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
                "on_end": self._on_end,
            },
        )

    # Parser callbacks ------------------------------------------------------

    def _on_part_begin(self) -> None:
        self._headers = {}
        self._header_field = b""
        self._header_value = b""

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._headers[self._header_field.lower()] = self._header_value
        self._header_field = b""
        self._header_value = b""

    def _on_headers_finished(self) -> None:
        self._events.append((_HEADERS, self._headers))

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        if end > start:
            self._events.append((_DATA, bytes(data[start:end])))

    def _on_part_end(self) -> None:
        self._events.append((_PART_END, None))

    def _on_end(self) -> None:
        self._completed = True
        self._events.append((_DONE, None))

    # Event pump ------------------------------------------------------------

    async def _next_event(self) -> Tuple[str, object]:
        while not self._events:
            if self._body_exhausted:
                return (_DONE, None)
            try:
                chunk = await self._body.__anext__()
            except StopAsyncIteration:
                self._body_exhausted = True
                if not self._completed:
                    raise MultipartFormError("Multipart body ended unexpectedly")
                continue
            if not chunk:
                continue
            try:
                self._parser.write(chunk)
            except MultipartParseError as e:
                raise MultipartFormError(f"Malformed multipart body: {e}") from e
        return self._events.popleft()

    async def _part_chunks(self) -> AsyncIterator[bytes]:
        while True:
            kind, payload = await self._next_event()
            if kind == _DATA:
                yield payload
            elif kind == _PART_END:
                return
            else:
                raise MultipartFormError("Multipart part ended unexpectedly")

    # Iteration -------------------------------------------------------------

    def __aiter__(self) -> "MultipartFileStream":
        return self

    async def __anext__(self) -> StreamedFilePart:
        if self._current is not None and not self._current.finished:
            await self._current.drain()
        self._current = None

        while True:
            kind, payload = await self._next_event()
            if kind == _DONE:
                raise StopAsyncIteration
            if kind != _HEADERS:
                raise MultipartFormError("Unexpected multipart event outside a part")

            headers: Dict[bytes, bytes] = payload
            _, disposition = parse_options_header(headers.get(b"content-disposition"))
            raw_filename = disposition.get(b"filename")

            if not raw_filename:
                # Form field, or a file input left empty by the browser
                async for _ in self._part_chunks():
                    pass
                continue

            content_type = headers.get(b"content-type", b"").decode("latin-1").strip()
            self._current = StreamedFilePart(
                self,
                filename=raw_filename.decode("utf-8", errors="replace"),
                content_type=content_type,
            )
            return self._current
