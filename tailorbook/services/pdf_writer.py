from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QBuffer, QIODevice, QSizeF
from PySide6.QtGui import QFont, QGuiApplication, QPageSize, QPdfWriter, QTextDocument


_application: Optional[QGuiApplication] = None


def html_to_pdf(html_content: str, title: str) -> bytes:
    """Lay out ``html_content`` on A4 pages and return the PDF bytes.

    Rendering happens into an in-memory buffer, so nothing reaches the disk
    until the caller decides to save the result.
    """
    _ensure_application()

    buffer = QBuffer()
    if not buffer.open(QIODevice.OpenModeFlag.WriteOnly):
        raise RuntimeError("Unable to open PDF buffer")

    pdf_writer = QPdfWriter(buffer)
    pdf_writer.setPageSize(QPageSize(QPageSize.PageSizeId.A4))
    pdf_writer.setResolution(144)
    pdf_writer.setTitle(title)

    document = QTextDocument()
    document.setDocumentMargin(36)
    document.setDefaultFont(QFont("Helvetica", 10))
    document.setHtml(html_content)

    page_width = pdf_writer.width()
    page_height = pdf_writer.height()
    document.setPageSize(QSizeF(page_width, page_height))

    document.print_(pdf_writer)
    del pdf_writer
    payload = bytes(buffer.data().data())
    buffer.close()
    if not payload.startswith(b"%PDF"):
        raise RuntimeError("PDF writer produced no output")
    return payload


def _ensure_application() -> None:
    # Font metrics need a GUI application; reuse the running one when there is one.
    global _application
    if QGuiApplication.instance() is None:
        _application = QGuiApplication([])
