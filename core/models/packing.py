# =============================================================================
# core/models/packing.py - Box Packing Schemas
# =============================================================================
# Request and response bodies for the admin box packer:
# bottle scans, packing progress, judge boxes, stickers and judge labels.
# =============================================================================

from pydantic import BaseModel, Field


class BottleScanRequest(BaseModel):
    """
    One bottle scanned into a judge's box.

    bottle_number is the ordinal printed on the bottle's sticker. When it is
    sent, scanning the same sticker twice is rejected.
    """
    judge_id: str = Field(..., min_length=1)
    sauce_id: str = Field(..., min_length=1)
    bottle_number: int | None = Field(default=None, ge=1)


class BoxAssignmentRequest(BaseModel):
    """Body for POST /admin/boxes."""
    box_label: str = Field(..., min_length=1)
    sauce_ids: list[str] = Field(..., min_length=1)


class JudgeBoxAssignment(BaseModel):
    """A sauce sitting in a judge's box."""
    sauce_id: str
    sauce_code: str
    sauce_name: str
    brand_name: str


class ScanResult(BaseModel):
    """Outcome of a recorded bottle scan."""
    success: bool = True
    scan_count: int
    auto_boxed: bool
    message: str
    assignment: JudgeBoxAssignment
    assigned_count: int
    box_message: str
    judge_name: str


class SaucePackingStatus(BaseModel):
    """Scan progress for an arrived sauce."""
    sauce_id: str
    sauce_code: str
    sauce_name: str
    brand_name: str
    status: str
    scan_count: int


class ConflictCheck(BaseModel):
    """Result of a conflict-of-interest check."""
    conflict: bool
    message: str
    judge_email: str | None = None
    sauce_code: str | None = None


class StickerData(BaseModel):
    """Sticker print run for one sauce."""
    sauce_id: str
    sauce_code: str
    sauce_name: str
    brand_name: str
    stickers_needed: int


class StickerSheetSummary(BaseModel):
    """Everything the sticker generator needs."""
    sticker_data: list[StickerData]
    total_judges: int
    boxes_needed: int
    stickers_per_sauce: int


class JudgeLabelData(BaseModel):
    """Address label for a judge's box."""
    judge_id: str
    name: str
    email: str
    type: str
    address_line1: str
    address_line2: str
    qr_code_url: str
