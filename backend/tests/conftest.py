"""
Shared fixtures: synthetic documents and fake collaborators.
"""

import io

import fitz
import pytest
from docx import Document
from PIL import Image, ImageDraw, ImageFont

from relay_service.errors import OcrFailure
from relay_service.processing import ImageOcrExtractor, PdfExtractor, ExtractionRouter


class FakeReader:
    """Stands in for easyocr.Reader; returns a fixed text for every image."""

    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def readtext(self, image, detail=0, paragraph=False):
        self.calls.append(image)
        if self.error is not None:
            raise self.error
        return [self.text] if self.text else []


class CountingImageExtractor:
    """Image extractor that returns scripted texts and counts calls."""

    def __init__(self, texts=None, fail_on=None):
        self.texts = list(texts or [])
        self.fail_on = fail_on
        self.calls = []

    def extract_image_text(self, img_bytes):
        self.calls.append(img_bytes)
        if self.fail_on is not None and len(self.calls) == self.fail_on:
            raise OcrFailure("engine crashed")
        if self.texts:
            return self.texts.pop(0)
        return ""


def _png(width=64, height=32, color="white", mode="RGB"):
    img = Image.new(mode, (width, height), color)
    out = io.BytesIO()
    img.save(out, format="PNG")
    return out.getvalue()


def _text_image(text, width=900, height=200, font_size=64):
    img = Image.new("RGB", (width, height), "white")
    draw = ImageDraw.Draw(img)
    font = ImageFont.load_default(size=font_size)
    draw.text((40, 60), text, fill="black", font=font)
    out = io.BytesIO()
    img.save(out, format="PNG")
    return out.getvalue()


def _text_pdf(*pages):
    doc = fitz.open()
    for text in pages:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text, fontsize=12)
    data = doc.tobytes()
    doc.close()
    return data


def _blank_pdf(page_count):
    return _text_pdf(*([""] * page_count))


def _scanned_pdf(text):
    doc = fitz.open()
    page = doc.new_page()
    page.insert_image(page.rect, stream=_text_image(text))
    data = doc.tobytes()
    doc.close()
    return data


def _docx(*paragraphs, table=None):
    doc = Document()
    for para in paragraphs:
        doc.add_paragraph(para)
    if table:
        t = doc.add_table(rows=len(table), cols=len(table[0]))
        for r, row in enumerate(table):
            for c, value in enumerate(row):
                t.cell(r, c).text = value
    out = io.BytesIO()
    doc.save(out)
    return out.getvalue()


@pytest.fixture
def make_png():
    return _png


@pytest.fixture
def make_text_image():
    return _text_image


@pytest.fixture
def make_text_pdf():
    return _text_pdf


@pytest.fixture
def make_blank_pdf():
    return _blank_pdf


@pytest.fixture
def make_scanned_pdf():
    return _scanned_pdf


@pytest.fixture
def make_docx():
    return _docx


@pytest.fixture
def fake_reader():
    return FakeReader("RECOGNIZED TEXT")


@pytest.fixture
def counting_extractor():
    return CountingImageExtractor


@pytest.fixture
def router_factory():
    """Build a real router whose OCR engine is a FakeReader."""
    def _build(ocr_text="", reader=None, max_pages=3):
        reader = reader or FakeReader(ocr_text)
        image_extractor = ImageOcrExtractor(reader=reader)
        pdf_extractor = PdfExtractor(image_extractor, max_pages=max_pages)
        return ExtractionRouter(image_extractor, pdf_extractor)
    return _build
