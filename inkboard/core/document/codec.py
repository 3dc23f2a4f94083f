"""
PDF codec contract used by the export engine, and its PyMuPDF implementation.

All drawing coordinates passed to a :class:`PageHandle` are in PDF user
space: points, origin at the bottom-left corner, y growing upward.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import fitz  # PyMuPDF

from ..errors import DecodeError, LoadError
from ..geometry import PageGeometry, Point
from ...utils.images import ImageFormat, sniff_format

RGB = Tuple[float, float, float]

# Base-14 font names mapped to PyMuPDF's short names
_FITZ_FONTS = {
    "Helvetica": "helv",
    "Times-Roman": "tiro",
    "Courier": "cour",
}


@dataclass(frozen=True)
class FontHandle:
    name: str
    ref: str


@dataclass(eq=False)
class ImageHandle:
    """An image embedded in an output document."""

    data: bytes
    format: ImageFormat
    width: int
    height: int
    # Object number once the image has been written into the document
    xref: int = 0


class PageHandle(ABC):
    """A page of an output document."""

    @property
    @abstractmethod
    def geometry(self) -> PageGeometry:
        """Unrotated page size in points."""

    @abstractmethod
    def set_rotation(self, degrees: int) -> None:
        """Turn the page by ``degrees`` on top of its own rotation."""

    @abstractmethod
    def draw_text(self, text: str, origin: Point, size: float,
                  color: RGB, font: FontHandle) -> None: ...

    @abstractmethod
    def draw_path(self, points: Sequence[Point], width: float, color: RGB) -> None: ...

    @abstractmethod
    def draw_image(self, image: ImageHandle, origin: Point,
                   width: float, height: float) -> None: ...


class DocumentHandle(ABC):
    @property
    @abstractmethod
    def page_count(self) -> int: ...

    @abstractmethod
    def close(self) -> None: ...


class PdfCodec(ABC):
    """Loads, assembles and serializes PDF documents."""

    @abstractmethod
    def load(self, data: bytes) -> DocumentHandle: ...

    @abstractmethod
    def create_empty(self) -> DocumentHandle: ...

    @abstractmethod
    def embed_standard_font(self, doc: DocumentHandle, name: str) -> FontHandle: ...

    @abstractmethod
    def copy_pages(self, dst: DocumentHandle, src: DocumentHandle,
                   indices: Sequence[int]) -> List[PageHandle]:
        """Append copies of the 0-based source ``indices`` to ``dst``, in order."""

    @abstractmethod
    def embed_image(self, doc: DocumentHandle, data: bytes,
                    image_format: ImageFormat) -> ImageHandle: ...

    @abstractmethod
    def serialize(self, doc: DocumentHandle) -> bytes: ...


# ==============================================================================
# PyMuPDF implementation
# ==============================================================================


class FitzDocument(DocumentHandle):
    """
    A PyMuPDF document.

    Page rotations are held back until serialization so that all drawing
    happens on unrotated pages.
    """

    def __init__(self, doc: fitz.Document):
        self.doc: Optional[fitz.Document] = doc
        self.rotations: Dict[int, int] = {}

    @property
    def page_count(self) -> int:
        return self.doc.page_count if self.doc else 0

    def close(self) -> None:
        if self.doc:
            self.doc.close()
            self.doc = None


class FitzPage(PageHandle):
    def __init__(self, owner: FitzDocument, page: fitz.Page, base_rotation: int = 0):
        self.owner = owner
        self.page = page
        self.base_rotation = base_rotation
        box = page.cropbox
        self._geometry = PageGeometry(box.width, box.height)

    @property
    def geometry(self) -> PageGeometry:
        return self._geometry

    def _to_page(self, point: Point) -> fitz.Point:
        # PDF space relative to the crop box -> MuPDF page space (top-left of
        # the crop box, y down). Pages are unrotated while drawing.
        return fitz.Point(point[0], self._geometry.height - point[1])

    def set_rotation(self, degrees: int) -> None:
        self.owner.rotations[self.page.number] = (self.base_rotation + degrees) % 360

    def draw_text(self, text: str, origin: Point, size: float,
                  color: RGB, font: FontHandle) -> None:
        self.page.insert_text(
            self._to_page(origin), text,
            fontname=font.ref,
            fontsize=size,
            color=color,
        )

    def draw_path(self, points: Sequence[Point], width: float, color: RGB) -> None:
        page_points = [self._to_page(p) for p in points]
        if len(page_points) == 1:
            page_points.append(page_points[0])

        shape = self.page.new_shape()
        shape.draw_polyline(page_points)
        shape.finish(color=color, fill=None, width=width, closePath=False)
        shape.commit()

    def draw_image(self, image: ImageHandle, origin: Point,
                   width: float, height: float) -> None:
        lower_left = self._to_page(origin)
        upper_right = self._to_page((origin[0] + width, origin[1] + height))
        rect = fitz.Rect(lower_left, upper_right).normalize()

        if image.xref:
            self.page.insert_image(rect, xref=image.xref, keep_proportion=False)
        else:
            image.xref = self.page.insert_image(rect, stream=image.data, keep_proportion=False)


class FitzCodec(PdfCodec):
    """PDF codec backed by PyMuPDF."""

    def load(self, data: bytes) -> FitzDocument:
        """
        Parse PDF bytes.

        Raises:
            LoadError: If the bytes are not a readable PDF with pages
        """
        if not data:
            raise LoadError("Empty document")
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise LoadError(f"Could not open PDF: {e}") from e

        if doc.page_count == 0:
            doc.close()
            raise LoadError("Document has no pages")
        return FitzDocument(doc)

    def create_empty(self) -> FitzDocument:
        return FitzDocument(fitz.open())

    def embed_standard_font(self, doc: DocumentHandle, name: str) -> FontHandle:
        try:
            ref = _FITZ_FONTS[name]
        except KeyError:
            raise ValueError(f"Not a standard font: {name}") from None
        return FontHandle(name=name, ref=ref)

    def copy_pages(self, dst: FitzDocument, src: FitzDocument,
                   indices: Sequence[int]) -> List[FitzPage]:
        first = dst.doc.page_count
        for index in indices:
            dst.doc.insert_pdf(src.doc, from_page=index, to_page=index)

        # Inserting invalidates page objects, so load them afterwards
        pages = []
        for number in range(first, dst.doc.page_count):
            page = dst.doc[number]
            # Draw unrotated; the source rotation is restored on serialize
            base_rotation = page.rotation
            if base_rotation:
                dst.rotations[number] = base_rotation
                page.set_rotation(0)
            pages.append(FitzPage(dst, page, base_rotation))
        return pages

    def embed_image(self, doc: DocumentHandle, data: bytes,
                    image_format: ImageFormat) -> ImageHandle:
        """
        Decode and register an image for drawing.

        Raises:
            DecodeError: If the payload does not match its format or cannot
                be decoded
        """
        if sniff_format(data) is not image_format:
            raise DecodeError(f"Payload is not a {image_format.value} image")
        try:
            pix = fitz.Pixmap(data)
        except Exception as e:
            raise DecodeError(f"Could not decode image: {e}") from e
        return ImageHandle(data=data, format=image_format, width=pix.width, height=pix.height)

    def serialize(self, doc: FitzDocument) -> bytes:
        for number, degrees in doc.rotations.items():
            doc.doc[number].set_rotation(degrees)
        doc.rotations.clear()
        return doc.doc.tobytes(garbage=4, deflate=True)
