"""
Tests for memoir rasterization and the single-page PDF wrapper.
"""
from datetime import date
from io import BytesIO
import re
import pytest
from PIL import Image, ImageDraw, ImageFont
from app.core.errors import ExportError
from app.schemas.memoir import DailyJournal, PhotoEntry, PhotoSource
from app.services import export_service
from app.services.export_service import (
    MemoirDocument, JournalBlock, PhotoBlock, build_document, make_image_fetcher,
    render_memoir_image, render_memoir_pdf, wrap_image_as_pdf
)
from app.services.storage_service import LocalObjectStorage

MEDIA_BOX = re.compile(rb"/MediaBox\s*\[\s*0\s+0\s+([\d.]+)\s+([\d.]+)\s*\]")


def png_bytes(color="#88aacc", size=(40, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def page_size(pdf: bytes):
    match = MEDIA_BOX.search(pdf)
    assert match, "no MediaBox in PDF"
    return float(match.group(1)), float(match.group(2))


@pytest.fixture
def document():
    return MemoirDocument(
        title="Kyoto Trip - Travel Memoir",
        date_range="2024-04-01 - 2024-04-03",
        journals=[
            JournalBlock("Day 1", "Today we went to Fushimi Inari."),
            JournalBlock("Day 2", "Today we went to Ramen Shop. " * 12),
        ],
        photos=[PhotoBlock("/static/a.png", "Gates"), PhotoBlock("/static/b.png")],
    )


def test_build_document_labels_days():
    journals = [
        DailyJournal(day_index=0, date=date(2024, 4, 1), content="First"),
        DailyJournal(day_index=2, date=date(2024, 4, 3), content="Third"),
    ]
    photos = [PhotoEntry(url="/static/a.png", caption="A", source=PhotoSource.COVER, item_id=1)]

    doc = build_document("Memoir", date(2024, 4, 1), date(2024, 4, 3), journals, photos)

    assert doc.date_range == "2024-04-01 - 2024-04-03"
    assert [(j.label, j.content) for j in doc.journals] == [("Day 1", "First"), ("Day 3", "Third")]
    assert [(p.url, p.caption) for p in doc.photos] == [("/static/a.png", "A")]


def test_scale_multiplies_width(document):
    fetch = lambda url: png_bytes()  # noqa: E731
    single = render_memoir_image(document, fetch, scale=1)
    double = render_memoir_image(document, fetch, scale=2)
    assert single.size[0] == export_service.PAGE_WIDTH
    assert double.size[0] == 2 * export_service.PAGE_WIDTH
    assert double.size[1] > single.size[1]


def test_unloadable_photo_renders_placeholder(document):
    def broken(url):
        raise ConnectionError("unreachable")

    image = render_memoir_image(document, broken, scale=1)
    assert image.mode == "RGB"


def test_pdf_page_matches_bitmap_portrait():
    pdf = wrap_image_as_pdf(Image.new("RGB", (200, 300), "white"))
    assert pdf.startswith(b"%PDF")
    assert page_size(pdf) == (200.0, 300.0)


def test_pdf_page_matches_bitmap_landscape():
    pdf = wrap_image_as_pdf(Image.new("RGB", (300, 200), "white"))
    assert page_size(pdf) == (300.0, 200.0)


def test_render_memoir_pdf(document):
    pdf = render_memoir_pdf(document, lambda url: png_bytes(), scale=1)
    width, height = page_size(pdf)
    assert width == export_service.PAGE_WIDTH
    assert height > 0


def test_export_failure_raises_export_error(document, monkeypatch):
    def fail(image, quality=None):
        raise OSError("encoder broke")

    monkeypatch.setattr(export_service, "wrap_image_as_pdf", fail)
    with pytest.raises(ExportError) as exc_info:
        render_memoir_pdf(document, lambda url: png_bytes(), scale=1)
    assert exc_info.value.operation == "PDF export"


def test_image_fetcher_reads_local_storage(tmp_path):
    storage = LocalObjectStorage(root=str(tmp_path), url_prefix="/static")
    url = storage.upload(png_bytes(), "memoirs/1/photo.png")

    fetch = make_image_fetcher(storage)

    assert fetch(url) == png_bytes()
    with pytest.raises(ValueError):
        fetch("/static/memoirs/1/missing.png")


def test_wrap_text_breaks_long_lines():
    draw = ImageDraw.Draw(Image.new("RGB", (1, 1)))
    font = ImageFont.load_default(size=16)
    lines = export_service.wrap_text(draw, "word " * 60, font, 200)
    assert len(lines) > 1
    assert all(draw.textlength(line, font=font) <= 200 for line in lines)
