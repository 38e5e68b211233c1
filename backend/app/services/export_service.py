"""
Memoir export to PDF.

The memoir document (header, daily journal entries, photo collage, footer)
is rasterized to one bitmap with Pillow at an upscaling factor, encoded as
JPEG, and placed by reportlab on a single page whose size equals the
bitmap's pixel size. Pagination beyond one page is not supported.
"""
from dataclasses import dataclass, field
from io import BytesIO
from typing import Callable, List, Optional, Tuple
import logging
import httpx
from PIL import Image, ImageDraw, ImageFont, ImageOps
from reportlab.lib.pagesizes import landscape, portrait
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas
from app.core.config import settings
from app.core.errors import ExportError
from app.services.storage_service import ObjectStorage

logger = logging.getLogger(__name__)

# Layout in unscaled pixels
PAGE_WIDTH = 800
PADDING = 48
COLLAGE_COLUMNS = 3
COLLAGE_GAP = 20
POLAROID_BORDER = 10
CAPTION_HEIGHT = 28

INK = "#3d3027"
MUTED_INK = "#8a7b6e"
ACCENT = "#c0563b"
FRAME = "#ffffff"
FRAME_EDGE = "#e6ddd3"
PLACEHOLDER = "#d9d2ca"

ImageFetcher = Callable[[str], bytes]


@dataclass
class JournalBlock:
    label: str
    content: str


@dataclass
class PhotoBlock:
    url: str
    caption: str = ""


@dataclass
class MemoirDocument:
    """Everything the rendered memoir page shows."""
    title: str
    date_range: str
    journals: List[JournalBlock] = field(default_factory=list)
    photos: List[PhotoBlock] = field(default_factory=list)
    stamp: str = "Travel"
    footer: str = "~ The End ~"


def build_document(title: str, start_date, end_date, journals, photos) -> MemoirDocument:
    """Build the render input from memoir view data."""
    return MemoirDocument(
        title=title,
        date_range=f"{start_date.isoformat()} - {end_date.isoformat()}",
        journals=[JournalBlock(label=f"Day {j.day_index + 1}", content=j.content) for j in journals],
        photos=[PhotoBlock(url=p.url, caption=p.caption or "") for p in photos],
    )


def make_image_fetcher(storage: Optional[ObjectStorage] = None, timeout: float = None) -> ImageFetcher:
    """Fetch photo bytes from object storage, falling back to HTTP for remote URLs."""
    timeout = timeout or settings.PHOTO_FETCH_TIMEOUT

    def fetch(url: str) -> bytes:
        if storage is not None:
            content = storage.open(url)
            if content is not None:
                return content
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"Cannot fetch image from {url}")
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
        return response.content

    return fetch


def _font(size: int):
    if settings.MEMOIR_EXPORT_FONT:
        return ImageFont.truetype(settings.MEMOIR_EXPORT_FONT, size)
    return ImageFont.load_default(size=size)


def wrap_text(draw: ImageDraw.ImageDraw, text: str, font, max_width: int) -> List[str]:
    """Greedy word wrap; words wider than the line are broken by character."""
    lines: List[str] = []
    for paragraph in (text or "").splitlines() or [""]:
        current = ""
        for word in paragraph.split(" "):
            candidate = f"{current} {word}" if current else word
            if draw.textlength(candidate, font=font) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            # No spaces to break on (e.g. CJK text): split by character
            current = ""
            for ch in word:
                if draw.textlength(current + ch, font=font) > max_width and current:
                    lines.append(current)
                    current = ch
                else:
                    current += ch
        lines.append(current)
    return lines


def _load_tile(fetch_image: ImageFetcher, url: str, size: int) -> Optional[Image.Image]:
    try:
        with Image.open(BytesIO(fetch_image(url))) as img:
            return ImageOps.fit(img.convert("RGB"), (size, size))
    except Exception as e:
        logger.warning(f"Could not load memoir photo {url}: {e}")
        return None


def render_memoir_image(document: MemoirDocument, fetch_image: ImageFetcher, scale: int = None) -> Image.Image:
    """Rasterize the memoir document into a single RGB bitmap."""
    s = scale or settings.MEMOIR_EXPORT_SCALE
    width = PAGE_WIDTH * s
    pad = PADDING * s
    content_width = width - 2 * pad

    stamp_font = _font(14 * s)
    title_font = _font(34 * s)
    meta_font = _font(14 * s)
    label_font = _font(15 * s)
    body_font = _font(16 * s)
    caption_font = _font(13 * s)

    measure = ImageDraw.Draw(Image.new("RGB", (1, 1)))
    line_height = lambda font: int(getattr(font, "size", 11) * 1.45)  # noqa: E731

    title_lines = wrap_text(measure, document.title, title_font, content_width)
    journal_lines: List[Tuple[str, List[str]]] = [
        (j.label, wrap_text(measure, j.content, body_font, content_width - 24 * s))
        for j in document.journals
    ]

    tile = (content_width - (COLLAGE_COLUMNS - 1) * COLLAGE_GAP * s) // COLLAGE_COLUMNS
    photo_size = tile - 2 * POLAROID_BORDER * s
    frame_height = tile + CAPTION_HEIGHT * s
    rows = -(-len(document.photos) // COLLAGE_COLUMNS)

    # First pass: total height
    height = pad
    height += line_height(stamp_font) + 12 * s
    height += len(title_lines) * line_height(title_font)
    height += line_height(meta_font) + 32 * s
    for _, lines in journal_lines:
        height += line_height(label_font) + len(lines) * line_height(body_font) + 24 * s
    if rows:
        height += 16 * s + rows * frame_height + (rows - 1) * COLLAGE_GAP * s
    height += 40 * s + line_height(meta_font) + pad

    image = Image.new("RGB", (width, height), settings.MEMOIR_EXPORT_BACKGROUND)
    draw = ImageDraw.Draw(image)

    # Header
    y = pad
    stamp_w = int(draw.textlength(document.stamp, font=stamp_font)) + 16 * s
    draw.rectangle(
        [(width - stamp_w) // 2, y, (width + stamp_w) // 2, y + line_height(stamp_font)],
        outline=ACCENT, width=max(s, 1)
    )
    draw.text((width // 2, y + line_height(stamp_font) // 2), document.stamp,
              font=stamp_font, fill=ACCENT, anchor="mm")
    y += line_height(stamp_font) + 12 * s
    for line in title_lines:
        draw.text((width // 2, y), line, font=title_font, fill=INK, anchor="ma")
        y += line_height(title_font)
    draw.text((width // 2, y), document.date_range, font=meta_font, fill=MUTED_INK, anchor="ma")
    y += line_height(meta_font) + 32 * s

    # Daily journal entries
    for label, lines in journal_lines:
        draw.text((pad, y), label, font=label_font, fill=ACCENT)
        y += line_height(label_font)
        draw.line([pad + 4 * s, y, pad + 4 * s, y + len(lines) * line_height(body_font)],
                  fill=FRAME_EDGE, width=2 * s)
        for line in lines:
            draw.text((pad + 24 * s, y), line, font=body_font, fill=INK)
            y += line_height(body_font)
        y += 24 * s

    # Photo collage
    if rows:
        y += 16 * s
        for index, photo in enumerate(document.photos):
            row, col = divmod(index, COLLAGE_COLUMNS)
            x0 = pad + col * (tile + COLLAGE_GAP * s)
            y0 = y + row * (frame_height + COLLAGE_GAP * s)
            draw.rectangle([x0, y0, x0 + tile, y0 + frame_height], fill=FRAME, outline=FRAME_EDGE, width=s)
            px, py = x0 + POLAROID_BORDER * s, y0 + POLAROID_BORDER * s
            picture = _load_tile(fetch_image, photo.url, photo_size)
            if picture is None:
                draw.rectangle([px, py, px + photo_size, py + photo_size], fill=PLACEHOLDER)
                draw.text((px + photo_size // 2, py + photo_size // 2), "Image unavailable",
                          font=caption_font, fill=MUTED_INK, anchor="mm")
            else:
                image.paste(picture, (px, py))
            if photo.caption:
                caption = wrap_text(draw, photo.caption, caption_font, photo_size)[0]
                draw.text((x0 + tile // 2, py + photo_size + (CAPTION_HEIGHT * s) // 2 + POLAROID_BORDER * s // 2),
                          caption, font=caption_font, fill=INK, anchor="mm")
        y += rows * frame_height + (rows - 1) * COLLAGE_GAP * s

    # Footer
    y += 40 * s
    draw.text((width // 2, y), document.footer, font=meta_font, fill=MUTED_INK, anchor="ma")
    return image


def wrap_image_as_pdf(image: Image.Image, quality: int = None) -> bytes:
    """Encode the bitmap as JPEG and place it on one page of exactly its size."""
    quality = quality or settings.MEMOIR_EXPORT_JPEG_QUALITY
    img_buffer = BytesIO()
    image.convert("RGB").save(img_buffer, format="JPEG", quality=quality)
    img_buffer.seek(0)

    img_width, img_height = image.size
    orient = landscape if img_width > img_height else portrait
    pdf_buffer = BytesIO()
    pdf = canvas.Canvas(pdf_buffer, pagesize=orient((img_width, img_height)))
    pdf.drawImage(ImageReader(img_buffer), 0, 0, width=img_width, height=img_height)
    pdf.showPage()
    pdf.save()
    return pdf_buffer.getvalue()


def render_memoir_pdf(
    document: MemoirDocument,
    fetch_image: ImageFetcher,
    scale: int = None,
    quality: int = None
) -> bytes:
    """
    Render the memoir to PDF bytes.

    Any rendering or encoding error raises ExportError; nothing partial is
    returned or written.
    """
    try:
        image = render_memoir_image(document, fetch_image, scale=scale)
        pdf_bytes = wrap_image_as_pdf(image, quality=quality)
    except Exception as e:
        logger.error(f"Memoir export failed for '{document.title}': {e}", exc_info=True)
        raise ExportError(str(e), operation="PDF export") from e
    logger.info(f"Exported memoir '{document.title}' ({image.size[0]}x{image.size[1]} px, {len(pdf_bytes)} bytes)")
    return pdf_bytes
