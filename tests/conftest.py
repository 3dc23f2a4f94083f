import os
import sys

# Offscreen platform for Qt
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

import fitz  # PyMuPDF
import pytest
from PyQt5.QtCore import QCoreApplication

from inkboard.core.document.codec import (
    DocumentHandle,
    FontHandle,
    ImageHandle,
    PageHandle,
    PdfCodec,
)
from inkboard.core.errors import DecodeError, LoadError
from inkboard.core.geometry import PageGeometry

app = QCoreApplication.instance() or QCoreApplication(sys.argv)


def make_pdf(pages):
    """Build a PDF from (width, height, label) tuples."""
    doc = fitz.open()
    for width, height, label in pages:
        page = doc.new_page(width=width, height=height)
        page.insert_text((36, 36), label, fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


def make_png(width=20, height=10):
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, width, height), False)
    pix.set_rect(pix.irect, (200, 30, 30))
    return pix.tobytes("png")


@pytest.fixture
def abc_pdf():
    """Three pages of different sizes labelled A, B and C."""
    return make_pdf([(600, 800, "A"), (400, 500, "B"), (300, 300, "C")])


@pytest.fixture
def png_bytes():
    return make_png()


# ------------------------------------------------------------
# Recording codec so the export engine can be tested without PyMuPDF output
# ------------------------------------------------------------

class FakeDocument(DocumentHandle):
    def __init__(self, labels):
        self.labels = list(labels)
        self.closed = False

    @property
    def page_count(self):
        return len(self.labels)

    def close(self):
        self.closed = True


class FakePage(PageHandle):
    def __init__(self, label, geometry):
        self.label = label
        self._geometry = geometry
        self.rotation = 0
        self.calls = []

    @property
    def geometry(self):
        return self._geometry

    def set_rotation(self, degrees):
        self.rotation = degrees

    def draw_text(self, text, origin, size, color, font):
        self.calls.append(("text", text, origin, size, color, font.name))

    def draw_path(self, points, width, color):
        self.calls.append(("path", list(points), width, color))

    def draw_image(self, image, origin, width, height):
        self.calls.append(("image", image, origin, width, height))


class FakeCodec(PdfCodec):
    """
    Source documents are encoded as ``b"FAKE:A,B,C"``; every page is 100x200.
    """

    geometry = PageGeometry(100, 200)

    def __init__(self, fail_on_serialize=False):
        self.fail_on_serialize = fail_on_serialize
        self.pages = []
        self.embedded = []
        self.documents = []

    def load(self, data):
        if not data or not data.startswith(b"FAKE:"):
            raise LoadError("not a fake document")
        doc = FakeDocument(data[5:].decode().split(","))
        self.documents.append(doc)
        return doc

    def create_empty(self):
        doc = FakeDocument([])
        self.documents.append(doc)
        return doc

    def embed_standard_font(self, doc, name):
        return FontHandle(name=name, ref=name)

    def copy_pages(self, dst, src, indices):
        pages = []
        for index in indices:
            label = src.labels[index]
            dst.labels.append(label)
            pages.append(FakePage(label, self.geometry))
        self.pages.extend(pages)
        return pages

    def embed_image(self, doc, data, image_format):
        if data.endswith(b"BROKEN"):
            raise DecodeError("corrupt image")
        handle = ImageHandle(data=data, format=image_format, width=1, height=1)
        self.embedded.append(handle)
        return handle

    def serialize(self, doc):
        if self.fail_on_serialize:
            raise RuntimeError("disk full")
        return ("PDF:" + ",".join(doc.labels)).encode()


@pytest.fixture
def fake_codec():
    return FakeCodec()


class FakeRenderer:
    """Stand-in for FitzPageRenderer with fixed page sizes."""

    def __init__(self, geometries):
        self.geometries = list(geometries)
        self.closed = False
        self.rendered = []

    @property
    def page_count(self):
        return len(self.geometries)

    def get_all_geometries(self):
        return list(self.geometries)

    def render_page(self, source_index, scale, rotation=0):
        self.rendered.append((source_index, scale, rotation))
        return (source_index, scale, rotation)

    def close(self):
        self.closed = True


@pytest.fixture
def fake_renderer_factory():
    """Factory accepting ``b"FAKE:..."`` bytes; rejects anything else."""
    created = []

    def factory(data):
        if not data.startswith(b"FAKE:"):
            raise LoadError("not a PDF")
        labels = data[5:].decode().split(",")
        renderer = FakeRenderer([PageGeometry(100 * (i + 1), 200) for i in range(len(labels))])
        created.append(renderer)
        return renderer

    factory.created = created
    return factory
