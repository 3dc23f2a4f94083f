from inkboard.controllers import EditController
from inkboard.core.document.pdf_exporter import PDFExporter
from inkboard.core.document.preview_worker import PreviewWorker
from inkboard.core.document.renderer import FitzPageRenderer
from inkboard.core.export.export_worker import ExportWorker
from inkboard.core.geometry import PageGeometry
from inkboard.core.items import TextItem
from inkboard.core.page import Direction
from inkboard.core.session import EditSession, ExportSnapshot


def test_renderer_reports_native_sizes(abc_pdf):
    renderer = FitzPageRenderer(abc_pdf)
    try:
        assert renderer.get_all_geometries() == [
            PageGeometry(600, 800), PageGeometry(400, 500), PageGeometry(300, 300)]
        image = renderer.render_page(1, 0.5)
        assert (image.width(), image.height()) == (300, 400)
        rotated = renderer.render_page(1, 0.5, 90)
        assert (rotated.width(), rotated.height()) == (400, 300)
    finally:
        renderer.close()
    assert not renderer.is_loaded()


def test_preview_worker_tags_results_with_generation(fake_renderer_factory):
    renderer = fake_renderer_factory(b"FAKE:A,B")
    worker = PreviewWorker(renderer, [(1, 2, 0), (2, 1, 90)], 1.5, generation=7)
    rendered, done = [], []
    worker.page_rendered.connect(lambda gen, page, image: rendered.append((gen, page, image)))
    worker.finished_rendering.connect(done.append)

    worker.run()

    assert rendered == [(7, 1, (2, 1.5, 0)), (7, 2, (1, 1.5, 90))]
    assert done == [7]


def test_cancelled_preview_worker_renders_nothing(fake_renderer_factory):
    renderer = fake_renderer_factory(b"FAKE:A")
    worker = PreviewWorker(renderer, [(1, 1, 0)], 1.0, generation=1)
    worker.cancel()
    worker.run()
    assert renderer.rendered == []


def test_export_worker_emits_result(fake_codec):
    snapshot = ExportSnapshot(source_bytes=b"FAKE:A,B", page_order=(2, 1), rotations={},
                              items=(), file_name="edited-x.pdf")
    worker = ExportWorker(snapshot, PDFExporter(fake_codec))
    exported, finished = [], []
    worker.exported.connect(lambda name, data: exported.append((name, data)))
    worker.finished.connect(lambda ok, message: finished.append((ok, message)))

    worker.run()

    assert exported == [("edited-x.pdf", b"PDF:B,A")]
    assert finished == [(True, "PDF exported successfully!")]


def test_export_worker_reports_failure(fake_codec):
    snapshot = ExportSnapshot(source_bytes=b"junk", page_order=(1,), rotations={}, items=())
    worker = ExportWorker(snapshot, PDFExporter(fake_codec))
    finished = []
    worker.finished.connect(lambda ok, message: finished.append((ok, message)))

    worker.run()

    assert worker.result is None
    assert finished[0][0] is False


def make_controller(factory):
    return EditController(EditSession(renderer_factory=factory))


def test_controller_reports_load_failure(fake_renderer_factory):
    controller = make_controller(fake_renderer_factory)
    failures = []
    controller.load_failed.connect(failures.append)

    assert not controller.open_document(b"junk", "junk.pdf")
    assert failures == ["Could not open PDF. Try another file."]
    assert not controller.session.is_loaded()


def test_controller_drops_stale_renders(fake_renderer_factory):
    controller = make_controller(fake_renderer_factory)
    try:
        controller.open_document(b"FAKE:A,B", "a.pdf")
        stale = controller.session.generation
        controller.open_document(b"FAKE:C", "c.pdf")

        received = []
        controller.page_rendered.connect(lambda page, image: received.append(page))
        controller._on_page_rendered(stale, 1, "old")
        controller._on_page_rendered(controller.session.generation, 1, "new")

        assert received == [1]
    finally:
        controller.shutdown()


def test_controller_refuses_last_page_delete(fake_renderer_factory):
    controller = make_controller(fake_renderer_factory)
    try:
        controller.open_document(b"FAKE:A", "a.pdf")
        errors = []
        controller.error.connect(errors.append)

        assert not controller.delete_current_page()
        assert errors == ["Cannot remove the last page."]
    finally:
        controller.shutdown()


def test_controller_undo_emits_changes(fake_renderer_factory):
    controller = make_controller(fake_renderer_factory)
    try:
        controller.open_document(b"FAKE:A,B", "a.pdf")
        item = controller.add_text_at(1, (10, 10))
        changes = []
        controller.items_changed.connect(lambda: changes.append("items"))
        controller.selection_changed.connect(changes.append)

        assert controller.undo()
        assert controller.session.items == ()
        assert changes == ["items", None]
        assert item.page == 1
    finally:
        controller.shutdown()


def test_controller_export_without_document(fake_renderer_factory):
    controller = make_controller(fake_renderer_factory)
    errors = []
    controller.error.connect(errors.append)
    assert controller.export() is None
    assert errors == ["Open a PDF before exporting."]


def test_controller_export_uses_session_codec(fake_renderer_factory, fake_codec):
    controller = EditController(EditSession(codec=fake_codec, renderer_factory=fake_renderer_factory))
    try:
        controller.open_document(b"FAKE:A,B", "a.pdf")
        controller.session.move_page(Direction.NEXT, 1)

        worker = controller.export()
        worker.wait()

        assert worker.exporter.codec is fake_codec
        assert worker.result == b"PDF:B,A"
    finally:
        controller.shutdown()


def test_export_worker_counts_skipped_items(fake_codec):
    bad = TextItem(id="t", page=1, x=0, y=0, text="x", font_size=12, color="red")
    snapshot = ExportSnapshot(source_bytes=b"FAKE:A", page_order=(1,), rotations={},
                              items=(bad,))
    worker = ExportWorker(snapshot, PDFExporter(fake_codec))
    finished = []
    worker.finished.connect(lambda ok, message: finished.append((ok, message)))

    worker.run()

    assert finished == [(True, "PDF exported; 1 item(s) could not be drawn and were skipped.")]
