# =============================================================================
# core/packing.py - Sauce Lifecycle State Machine
# =============================================================================
# Pure functions over persisted facts (stored status, payment status, scan
# count, score count). Services load the facts and call these; nothing here
# touches the database.
#
#   registered --(admin, paid)--> arrived --(7 scans | admin)--> boxed
#   boxed + scores  =>  judged (derived, never stored)
# =============================================================================

from core.competition import CompetitionRules, get_rules
from core.models.sauce import PaymentStatus, SauceStatus

# Stored statuses an admin may set directly. "judged" is derived.
STORABLE_STATUSES = frozenset({SauceStatus.REGISTERED, SauceStatus.ARRIVED, SauceStatus.BOXED})


def check_transition(
    current: SauceStatus | str,
    target: SauceStatus | str,
    payment_status: PaymentStatus | str | None,
) -> str | None:
    """
    Check whether an admin may move a sauce to a new stored status.

    Admins may override any stored status (including moving backwards to
    fix mistakes), with three exceptions: "judged" can't be stored, a sauce
    can't be marked arrived until its entry fee is paid, and only an arrived
    sauce can be boxed.

    Returns:
        An error message, or None if the change is allowed
    """
    target = SauceStatus(target)
    current = SauceStatus(current)

    if target not in STORABLE_STATUSES:
        return f'Status "{target.value}" is derived from judging scores and cannot be set directly.'

    if target == SauceStatus.ARRIVED and current != SauceStatus.ARRIVED:
        if PaymentStatus(payment_status or PaymentStatus.PENDING_PAYMENT) != PaymentStatus.PAID:
            return "Sauce cannot be marked as arrived until its entry fee is paid."

    if target == SauceStatus.BOXED and current not in (SauceStatus.ARRIVED, SauceStatus.BOXED):
        return (
            'Sauce must be in "arrived" status before it can be boxed. '
            f"Current status: {current.value}"
        )

    return None


def scan_rejection(status: SauceStatus | str, sauce_code: str | None) -> str | None:
    """Error message when a sauce isn't ready for bottle scanning, else None."""
    status = SauceStatus(status)
    if status != SauceStatus.ARRIVED:
        return (
            f'Sauce {sauce_code or "N/A"} is not in "arrived" status. '
            f"Current status: {status.value}"
        )
    return None


def status_after_scan(scan_count: int, rules: CompetitionRules | None = None) -> SauceStatus:
    """Status of an arrived sauce once it has scan_count bottles scanned."""
    rules = rules or get_rules()
    if scan_count >= rules.bottles_per_sauce:
        return SauceStatus.BOXED
    return SauceStatus.ARRIVED


def derive_status(stored: SauceStatus | str, score_count: int) -> SauceStatus:
    """
    Effective status of a sauce.

    A boxed sauce with at least one judging score is judged.
    """
    stored = SauceStatus(stored)
    if stored == SauceStatus.BOXED and score_count > 0:
        return SauceStatus.JUDGED
    return stored


def parse_bottle_qr(payload: str) -> tuple[str, int | None]:
    """
    Parse a sticker QR payload.

    Stickers encode "<sauce_id>:<bottle number>"; older stickers carry the
    bare sauce id.

    Returns:
        Tuple of (sauce_id, bottle_number or None)

    Raises:
        ValueError: If the payload is empty or the bottle number isn't a positive int
    """
    payload = (payload or "").strip()
    if not payload:
        raise ValueError("Empty QR payload")

    sauce_id, sep, number = payload.rpartition(":")
    if not sep:
        return payload, None

    if not number.isdigit() or int(number) < 1:
        raise ValueError(f"Invalid bottle number in QR payload: {payload}")
    return sauce_id, int(number)


def bottle_qr_payload(sauce_id: str, bottle_number: int) -> str:
    return f"{sauce_id}:{bottle_number}"
