"""
PDF output sinks.

The renderer writes into a sink, never into a response object directly.
A sink is file-like enough for reportlab (write/flush), can be ended once,
and announces failures to subscribers so callers can abandon the response.

    sink = BufferedPdfSink()
    with sink.session():
        ...draw and save into sink...
    pdf_bytes = sink.getvalue()

session() guarantees end() on every exit path; on error it fires the
failure signal first and re-raises.

The web app goes through generate_quotation_pdf(), which renders into a
BufferedPdfSink. StreamPdfSink is part of the library surface for callers
that write a quotation straight to a file or socket:

    with open("quotation.pdf", "wb") as f:
        renderer.render(request, totals, quote_id, StreamPdfSink(f))
"""

import io
import logging
from contextlib import contextmanager
from typing import Callable, List, Optional

log = logging.getLogger("quotegen.sink")


class SinkClosedError(IOError):
    """Write attempted after end() or after a failure."""


class PdfSink:
    """Base sink: subclasses implement _write()."""

    def __init__(self):
        self._closed = False
        self._error: Optional[BaseException] = None
        self._listeners: List[Callable[[BaseException], None]] = []

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def failed(self) -> bool:
        return self._error is not None

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def on_failure(self, callback: Callable[[BaseException], None]) -> None:
        self._listeners.append(callback)

    def write(self, data: bytes) -> int:
        if self._closed or self._error is not None:
            raise SinkClosedError("PDF sink is no longer accepting data")
        try:
            return self._write(bytes(data))
        except Exception as e:
            self.fail(e)
            raise

    def flush(self) -> None:
        pass

    def fail(self, exc: BaseException) -> None:
        """Record the first failure and notify subscribers once."""
        if self._error is not None:
            return
        self._error = exc
        log.error("PDF sink failed: %s", exc)
        for cb in list(self._listeners):
            try:
                cb(exc)
            except Exception as cb_err:
                log.warning("Sink failure listener raised: %s", cb_err)

    def end(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._end()

    @contextmanager
    def session(self):
        try:
            yield self
        except Exception as e:
            self.fail(e)
            raise
        finally:
            self.end()

    def _write(self, data: bytes) -> int:
        raise NotImplementedError

    def _end(self) -> None:
        pass


class BufferedPdfSink(PdfSink):
    """Collects the document in memory for a Flask response."""

    def __init__(self):
        super().__init__()
        self._buf = io.BytesIO()

    def _write(self, data: bytes) -> int:
        return self._buf.write(data)

    def getvalue(self) -> bytes:
        return self._buf.getvalue()


class StreamPdfSink(PdfSink):
    """Forwards bytes to an open binary stream (file, socket wrapper).

    Not used by the web routes; kept for writing documents directly to disk.
    """

    def __init__(self, stream, close_stream: bool = False):
        super().__init__()
        self._stream = stream
        self._close_stream = close_stream

    def _write(self, data: bytes) -> int:
        n = self._stream.write(data)
        return len(data) if n is None else n

    def _end(self) -> None:
        try:
            self._stream.flush()
        except (OSError, ValueError) as e:
            log.debug("Stream flush on end skipped: %s", e)
        if self._close_stream:
            self._stream.close()
