"""
Background worker for rendering page previews.
"""
import logging
from typing import List, Tuple

from PyQt5.QtCore import QThread, pyqtSignal

from .renderer import FitzPageRenderer

logger = logging.getLogger(__name__)

# (logical page, source page, rotation)
RenderJob = Tuple[int, int, int]


class PreviewWorker(QThread):
    """
    Worker thread rendering the pages of one document at one scale.

    Every result carries the session generation the worker was started for,
    so results that arrive after a new file has been loaded can be told apart
    and dropped by the receiver.
    """

    # Signals
    page_rendered = pyqtSignal(int, int, object)  # generation, logical page, QImage
    failed = pyqtSignal(int, str)  # generation, error message
    finished_rendering = pyqtSignal(int)  # generation

    def __init__(self, renderer: FitzPageRenderer, jobs: List[RenderJob],
                 scale: float, generation: int, parent=None):
        super().__init__(parent)
        self._renderer = renderer
        self._jobs = list(jobs)
        self._scale = scale
        self.generation = generation
        self._cancelled = False

    def cancel(self):
        """Cancel the render run."""
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def run(self):
        """Render every queued page, one after another."""
        try:
            for logical, source, rotation in self._jobs:
                if self._cancelled:
                    break
                image = self._renderer.render_page(source, self._scale, rotation)
                if self._cancelled:
                    break
                self.page_rendered.emit(self.generation, logical, image)

            self.finished_rendering.emit(self.generation)

        except Exception as e:
            logger.exception("Preview render failed")
            self.failed.emit(self.generation, str(e))
