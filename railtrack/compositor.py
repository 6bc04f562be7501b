"""Certificate composition: QR code + PDF layout + storage.

``DocumentCompositor.compose`` is the whole pipeline behind
``POST /api/generate-pdf``:

1. allocate a millisecond timestamp and derive ``railway-item-<ts>.pdf``;
2. derive the public URL of that file from the configured base URL;
3. encode the URL as a QR code;
4. lay out the certificate with the QR code in the top-right corner;
5. write the finished PDF to the artifact store in one atomic step;
6. return a :class:`CompletionDescriptor`.

The QR code printed on each certificate therefore always resolves to the very
file it is printed on.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from .errors import EncodingError, RailTrackError, RenderError
from .qr_utils import encode_png
from .records import ItemRecord
from .storage import ArtifactStore

logger = logging.getLogger(__name__)

ARTIFACT_PREFIX = "railway-item-"
ARTIFACT_SUFFIX = ".pdf"
UPLOADS_PATH = "/uploads/"

TITLE = "Railway Track Fitting Certificate"
HEADING = "Item Details"

W, H = A4
MARGIN = 50
QR_SIZE = 100
QR_RIGHT_OFFSET = 150
QR_GAP = 10

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
TITLE_SIZE = 24
HEADING_SIZE = 16
FIELD_SIZE = 12
FOOTER_SIZE = 10
FIELD_STEP = 6
QR_PIXELS = 200
QR_MARGIN = 2


def artifact_name(timestamp: int) -> str:
    return f"{ARTIFACT_PREFIX}{timestamp}{ARTIFACT_SUFFIX}"


class ArtifactNamer:
    """Hands out strictly increasing millisecond timestamps.

    Two requests arriving within the same millisecond (or a clock stepping
    backwards) would otherwise produce the same file name.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_timestamp(self) -> int:
        with self._lock:
            now = int(self._clock() * 1000)
            if now <= self._last:
                now = self._last + 1
            self._last = now
            return now


@dataclass(frozen=True)
class CompletionDescriptor:
    artifact_name: str
    relative_path: str
    absolute_url: str
    timestamp: int

    def to_json(self) -> dict:
        return {
            "success": True,
            "filename": self.artifact_name,
            "filepath": self.relative_path,
            "timestamp": self.timestamp,
            "fullUrl": self.absolute_url,
        }


def wrap_text(text: str, font: str, size: float, width: float) -> list:
    """Split ``text`` into lines no wider than ``width`` points.

    Words are kept whole where possible; a single token wider than the line is
    broken between characters.
    """

    lines = []
    for line in simpleSplit(text, font, size, width) or [""]:
        if stringWidth(line, font, size) <= width:
            lines.append(line)
            continue
        chunk = ""
        for ch in line:
            if chunk and stringWidth(chunk + ch, font, size) > width:
                lines.append(chunk)
                chunk = ch
            else:
                chunk += ch
        lines.append(chunk)
    return lines


class _Page:
    """Top-down text cursor over a reportlab canvas."""

    def __init__(self, c: canvas.Canvas):
        self.c = c
        self.y = H - MARGIN
        self.page_num = 1
        self.qr_bottom = None

    def ensure_room(self, height: float) -> None:
        if self.y - height < MARGIN:
            self.c.showPage()
            self.page_num += 1
            self.y = H - MARGIN

    def right_limit(self) -> float:
        # Text lines beside the QR code stop short of it.
        if self.page_num == 1 and self.qr_bottom is not None and self.y > self.qr_bottom:
            return W - QR_RIGHT_OFFSET - QR_GAP
        return W - MARGIN

    def title(self, text: str, font: str, size: int) -> None:
        # Centred in the column left of the QR code, shrunk until it fits there.
        left, right = MARGIN, W - QR_RIGHT_OFFSET - QR_GAP
        while size > 8 and stringWidth(text, font, size) > right - left:
            size -= 1
        self.ensure_room(size)
        self.y -= size
        self.c.setFont(font, size)
        self.c.drawCentredString((left + right) / 2, self.y, text)

    def heading(self, text: str, size: int) -> None:
        self.ensure_room(size)
        self.y -= size
        self.c.setFont(FONT_BOLD, size)
        self.c.drawString(MARGIN, self.y, text)
        width = self.c.stringWidth(text, FONT_BOLD, size)
        self.c.setLineWidth(1)
        self.c.line(MARGIN, self.y - 2, MARGIN + width, self.y - 2)

    def labelled(self, label: str, value: str, size: int) -> None:
        prefix = f"{label}: "
        leading = size * 1.2
        label_width = self.c.stringWidth(prefix, FONT_BOLD, size)
        self.ensure_room(leading)
        lines = wrap_text(value, FONT, size, self.right_limit() - MARGIN - label_width)
        for i, line in enumerate(lines):
            self.ensure_room(leading)
            self.y -= leading
            if i == 0:
                self.c.setFont(FONT_BOLD, size)
                self.c.drawString(MARGIN, self.y, prefix)
            self.c.setFont(FONT, size)
            self.c.drawString(MARGIN + label_width, self.y, line)

    def plain(self, text: str, size: int) -> None:
        leading = size * 1.2
        self.ensure_room(leading)
        self.y -= leading
        self.c.setFont(FONT, size)
        self.c.drawString(MARGIN, self.y, text)

    def skip(self, amount: float) -> None:
        self.y -= amount


def render_certificate(
    record: ItemRecord,
    url: str,
    timestamp: int,
    code_png: bytes,
    date_format: str = "%m/%d/%Y",
    timestamp_format: str = "%m/%d/%Y, %I:%M:%S %p",
    compress: bool = True,
) -> bytes:
    """Lay out one certificate and return the finished PDF bytes."""

    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4, pageCompression=1 if compress else 0)
    c.setTitle(TITLE)
    c.setSubject(url)
    c.setAuthor("RailTrack")

    page = _Page(c)
    page.qr_bottom = H - MARGIN - QR_SIZE
    c.drawImage(
        ImageReader(BytesIO(code_png)),
        W - QR_RIGHT_OFFSET,
        page.qr_bottom,
        width=QR_SIZE,
        height=QR_SIZE,
    )

    page.title(TITLE, FONT_BOLD, TITLE_SIZE)
    page.skip(TITLE_SIZE * 0.75)

    page.heading(HEADING, HEADING_SIZE)
    page.skip(HEADING_SIZE)

    for label, value in record.fields(date_format):
        page.labelled(label, value, FIELD_SIZE)
        page.skip(FIELD_STEP)

    page.skip(FIELD_SIZE)
    generated_at = datetime.fromtimestamp(timestamp / 1000)
    page.plain(f"Generated on: {generated_at.strftime(timestamp_format)}", FOOTER_SIZE)
    page.skip(FOOTER_SIZE)
    page.plain(f"Document ID: {timestamp}", FOOTER_SIZE)

    c.showPage()
    c.save()
    return buf.getvalue()


class DocumentCompositor:
    def __init__(
        self,
        store: ArtifactStore,
        base_url: str,
        timeout: float = 30.0,
        date_format: str = "%m/%d/%Y",
        timestamp_format: str = "%m/%d/%Y, %I:%M:%S %p",
        compress: bool = True,
        encoder=encode_png,
        namer: ArtifactNamer = None,
    ):
        self.store = store
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.date_format = date_format
        self.timestamp_format = timestamp_format
        self.compress = compress
        self.encoder = encoder
        self.namer = namer or ArtifactNamer()

    def url_for(self, name: str) -> str:
        return f"{self.base_url}{UPLOADS_PATH}{name}"

    def _build(self, record: ItemRecord, url: str, timestamp: int) -> bytes:
        try:
            code_png = self.encoder(url, width=QR_PIXELS, margin=QR_MARGIN)
        except RailTrackError:
            raise
        except Exception as e:
            raise EncodingError(f"QR encoding failed: {e}") from e

        try:
            return render_certificate(
                record,
                url,
                timestamp,
                code_png,
                date_format=self.date_format,
                timestamp_format=self.timestamp_format,
                compress=self.compress,
            )
        except Exception as e:
            raise RenderError(f"PDF layout failed: {e}") from e

    def compose(self, record: ItemRecord) -> CompletionDescriptor:
        """Generate, store and describe the certificate for ``record``.

        Encoding, layout and the store write share one ``timeout`` second
        deadline.  The PDF is buffered in memory and linked under its public
        name only if it is complete before the deadline, so an aborted request
        leaves nothing behind.
        """

        timestamp = self.namer.next_timestamp()
        name = artifact_name(timestamp)
        url = self.url_for(name)

        deadline = time.monotonic() + self.timeout
        # One thread per request: a render that never returns only holds its own.
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="railtrack-render")
        try:
            future = executor.submit(self._build, record, url, timestamp)
            pdf = future.result(timeout=self.timeout)
        except FutureTimeoutError as e:
            raise RenderError(f"Certificate generation exceeded {self.timeout:g}s") from e
        finally:
            executor.shutdown(wait=False)

        self.store.write(name, pdf, deadline=deadline)
        logger.info("Generated certificate %s (%d bytes)", name, len(pdf))
        return CompletionDescriptor(
            artifact_name=name,
            relative_path=UPLOADS_PATH + name,
            absolute_url=url,
            timestamp=timestamp,
        )
