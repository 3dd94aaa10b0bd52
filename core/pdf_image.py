# core/pdf_image.py
import logging
import fitz
from util.errors import ConversionError
from util.timing import timed

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"


def render_first_page_png(file_bytes: bytes, max_dimension: int = 1024) -> bytes:
    """
    Rasterize page 1 of a PDF to PNG, scaled so its long edge is `max_dimension` px.
    Everything happens in memory; nothing touches the filesystem.
    Raises ConversionError for unreadable, encrypted or empty documents.
    """
    if max_dimension <= 0:
        raise ValueError("max_dimension must be positive")

    try:
        with timed(logger, "pdf.render", bytes=len(file_bytes), max_dim=max_dimension):
            with fitz.open(stream=file_bytes, filetype="pdf") as doc:
                if doc.needs_pass:
                    raise ConversionError("PDF conversion failed: document is password protected")
                if doc.page_count == 0:
                    raise ConversionError("PDF conversion failed: document has no pages")
                page = doc.load_page(0)
                rect = page.rect
                long_edge = max(rect.width, rect.height)
                if long_edge <= 0:
                    raise ConversionError("PDF conversion failed: first page is empty")
                zoom = max_dimension / long_edge
                pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
                png = pix.tobytes("png")
    except ConversionError:
        raise
    except Exception as e:
        # do not log payloads
        logger.error("pdf.render.error err=%s", type(e).__name__)
        raise ConversionError(f"PDF conversion failed: {type(e).__name__}") from e

    logger.info("pdf.render.ok width=%d height=%d bytes=%d", pix.width, pix.height, len(png))
    return png
