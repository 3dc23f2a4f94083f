import fitz  # PyMuPDF
import pytest

from inkboard.core.document.codec import FitzCodec
from inkboard.core.document.pdf_exporter import PDFExporter
from inkboard.core.document.renderer import FitzPageRenderer
from inkboard.core.errors import ExportError, LoadError
from inkboard.core.geometry import PageGeometry
from inkboard.core.items import ImageItem, StrokeItem, TextItem


def open_pdf(data):
    return fitz.open(stream=data, filetype="pdf")


def test_codec_rejects_bad_input():
    codec = FitzCodec()
    with pytest.raises(LoadError):
        codec.load(b"")
    with pytest.raises(LoadError):
        codec.load(b"%PDF-1.4 truncated garbage")


def test_export_reorders_pages(abc_pdf):
    result = PDFExporter().export(abc_pdf, [3, 1], {}, [])
    with open_pdf(result) as doc:
        assert doc.page_count == 2
        assert doc[0].get_text().strip() == "C"
        assert doc[1].get_text().strip() == "A"
        assert (doc[0].rect.width, doc[0].rect.height) == (300, 300)
        assert (doc[1].rect.width, doc[1].rect.height) == (600, 800)


def test_export_applies_rotation(abc_pdf):
    result = PDFExporter().export(abc_pdf, [1, 2], {2: 90}, [])
    with open_pdf(result) as doc:
        assert doc[0].rotation == 0
        assert doc[1].rotation == 90


def test_source_rotation_preserved(abc_pdf):
    doc = open_pdf(abc_pdf)
    doc[0].set_rotation(180)
    source = doc.tobytes()
    doc.close()

    result = PDFExporter().export(source, [1], {}, [])
    with open_pdf(result) as out:
        assert out[0].rotation == 180


def test_text_lands_at_top_left(abc_pdf):
    item = TextItem(id="t", page=1, x=0.1, y=0.1, text="Stamped", font_size=16,
                    color="#d32f2f")
    result = PDFExporter().export(abc_pdf, [1], {}, [item])
    with open_pdf(result) as doc:
        (rect,) = doc[0].search_for("Stamped")
        assert rect.x0 == pytest.approx(60, abs=2)
        assert 70 < rect.y0 < 96


def test_text_on_rotated_page(abc_pdf):
    item = TextItem(id="t", page=1, x=0.1, y=0.1, text="Turned", font_size=16,
                    color="#000")
    result = PDFExporter().export(abc_pdf, [1], {1: 90}, [item])
    with open_pdf(result) as doc:
        assert doc[0].rotation == 90
        assert "Turned" in doc[0].get_text()


def test_strokes_and_images_drawn(abc_pdf, png_bytes):
    items = [
        StrokeItem(id="s", page=1, color="#0000ff", stroke_width=2,
                   points=((0.1, 0.1), (0.9, 0.9))),
        ImageItem(id="i1", page=1, x=0.1, y=0.5, width=0.3, height=0.1, image_data=png_bytes),
        ImageItem(id="i2", page=2, x=0.1, y=0.5, width=0.3, height=0.1, image_data=png_bytes),
    ]
    exporter = PDFExporter()
    result = exporter.export(abc_pdf, [1, 2], {}, items)

    assert exporter.embedded_images == 1
    with open_pdf(result) as doc:
        assert len(doc[0].get_drawings()) >= 1
        first = doc[0].get_images()
        second = doc[1].get_images()
        assert len(first) == len(second) == 1
        assert first[0][0] == second[0][0]


def test_malformed_image_does_not_abort(abc_pdf):
    items = [ImageItem(id="bad", page=1, x=0, y=0, width=0.2, height=0.2,
                       image_data=b"\x89PNG\r\n\x1a\nnot really")]
    exporter = PDFExporter()
    result = exporter.export(abc_pdf, [1], {}, items)
    assert [w.item_id for w in exporter.warnings] == ["bad"]
    with open_pdf(result) as doc:
        assert doc.page_count == 1


def test_bad_source_raises_export_error():
    with pytest.raises(ExportError):
        PDFExporter().export(b"not a pdf", [1], {}, [])


def test_text_placed_inside_offset_crop_box(abc_pdf):
    doc = open_pdf(abc_pdf)
    doc[0].set_cropbox(fitz.Rect(100, 100, 500, 700))
    source = doc.tobytes()
    doc.close()

    item = TextItem(id="t", page=1, x=0.1, y=0.1, text="Stamped", font_size=16,
                    color="#000")
    result = PDFExporter().export(source, [1], {}, [item])
    with open_pdf(result) as out:
        page = out[0]
        assert (page.rect.width, page.rect.height) == (400, 600)
        (rect,) = page.search_for("Stamped")
        # 0.1 of the 400x600 crop box, measured from its top-left corner
        assert rect.x0 == pytest.approx(40, abs=2)
        assert 45 < rect.y0 < 76


def test_rotated_source_previews_like_export(abc_pdf):
    doc = open_pdf(abc_pdf)
    doc[0].set_rotation(90)
    source = doc.tobytes()
    doc.close()

    renderer = FitzPageRenderer(source)
    try:
        assert renderer.get_page_geometry(1) == PageGeometry(600, 800)
        preview = renderer.render_page(1, 1.0, 90)
    finally:
        renderer.close()

    result = PDFExporter().export(source, [1], {1: 90}, [])
    with open_pdf(result) as out:
        page = out[0]
        assert page.rotation == 180
        assert (preview.width(), preview.height()) == (page.rect.width, page.rect.height)
