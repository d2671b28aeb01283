# =============================================================================
# core/labels.py - Printable Label Sheets
# =============================================================================
# Two label stocks are used on packing day:
# - Bottle stickers: Avery 4780, 48.5 x 25.4 mm, 4 x 10 = 40 per A4 sheet
# - Judge box labels: 99.1 x 67.7 mm, 2 x 4 = 8 per A4 sheet
#
# Labels are centred on the page. Sheets are rendered with Pillow and saved
# as a multi-page PDF; QR codes are drawn locally with qrcode.
# =============================================================================

import io
import logging
import math
from dataclasses import dataclass
from typing import Iterator, Sequence

import qrcode
from PIL import Image, ImageDraw, ImageFont

from core.models.packing import JudgeLabelData, StickerData
from core.packing import bottle_qr_payload

logger = logging.getLogger(__name__)

MM_PER_INCH = 25.4


@dataclass(frozen=True)
class LabelSheet:
    """Geometry of one label stock, in millimetres."""

    name: str
    label_width: float
    label_height: float
    cols: int
    rows: int
    page_width: float = 210.0
    page_height: float = 297.0
    content_border: float = 2.0

    @property
    def labels_per_page(self) -> int:
        return self.cols * self.rows

    @property
    def margin_x(self) -> float:
        return (self.page_width - self.cols * self.label_width) / 2

    @property
    def margin_y(self) -> float:
        return (self.page_height - self.rows * self.label_height) / 2

    def pages_needed(self, count: int) -> int:
        return math.ceil(count / self.labels_per_page) if count > 0 else 0

    def positions(self, count: int) -> Iterator[tuple[int, float, float]]:
        """
        Yield (page index, x, y) of each label's top-left corner.

        Labels fill a page row by row before moving to the next page.
        """
        for index in range(count):
            page, slot = divmod(index, self.labels_per_page)
            row, col = divmod(slot, self.cols)
            yield (
                page,
                self.margin_x + col * self.label_width,
                self.margin_y + row * self.label_height,
            )


STICKER_SHEET = LabelSheet(name="Avery 4780", label_width=48.5, label_height=25.4, cols=4, rows=10)
JUDGE_LABEL_SHEET = LabelSheet(name="Judge box label", label_width=99.1, label_height=67.7, cols=2, rows=4)


def _px(mm: float, dpi: int) -> int:
    return int(round(mm / MM_PER_INCH * dpi))


def _qr_image(data: str, size_px: int) -> Image.Image:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=1,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white").convert("RGB")
    return img.resize((size_px, size_px))


def _render(
    sheet: LabelSheet,
    cells: Sequence[tuple[str, list[str]]],
    qr_mm: float,
    dpi: int,
) -> bytes:
    """
    Draw label cells onto pages and return PDF bytes.

    Each cell is (qr payload, text lines). The QR sits on the left of the
    content area, text to its right.
    """
    if not cells:
        raise ValueError("Nothing to print")

    page_size = (_px(sheet.page_width, dpi), _px(sheet.page_height, dpi))
    pages = [Image.new("RGB", page_size, "white") for _ in range(sheet.pages_needed(len(cells)))]
    font = ImageFont.load_default()
    qr_px = _px(qr_mm, dpi)
    border_px = _px(sheet.content_border, dpi)

    for (page, x, y), (payload, lines) in zip(sheet.positions(len(cells)), cells):
        canvas = pages[page]
        left, top = _px(x, dpi) + border_px, _px(y, dpi) + border_px
        canvas.paste(_qr_image(payload, qr_px), (left, top))

        draw = ImageDraw.Draw(canvas)
        text_x = left + qr_px + border_px
        for offset, line in enumerate(lines):
            draw.text((text_x, top + offset * _px(4, dpi)), line, fill="black", font=font)

    buffer = io.BytesIO()
    pages[0].save(
        buffer,
        format="PDF",
        save_all=True,
        append_images=pages[1:],
        resolution=float(dpi),
    )
    logger.info(f"Rendered {len(cells)} {sheet.name} labels on {len(pages)} pages")
    return buffer.getvalue()


def render_sticker_pdf(stickers: Sequence[StickerData], dpi: int = 150) -> bytes:
    """
    Render bottle stickers, one per bottle.

    Each sticker's QR encodes "<sauce_id>:<bottle number>" so the box packer
    can tell bottles of the same sauce apart.
    """
    cells = [
        (bottle_qr_payload(sticker.sauce_id, number), [sticker.sauce_code, f"#{number}"])
        for sticker in stickers
        for number in range(1, sticker.stickers_needed + 1)
    ]
    return _render(STICKER_SHEET, cells, qr_mm=18.0, dpi=dpi)


def render_judge_label_pdf(judges: Sequence[JudgeLabelData], dpi: int = 150) -> bytes:
    """Render one box label per judge with name, type, address and ID QR."""
    cells = [
        (
            judge.judge_id,
            [judge.name, judge.type.upper(), judge.address_line1, judge.address_line2],
        )
        for judge in judges
    ]
    return _render(JUDGE_LABEL_SHEET, cells, qr_mm=40.0, dpi=dpi)
