"""Donor ledger maintained from the admin back-office."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from flask import current_app

from lakehenry.extensions import db
from lakehenry.models import Donor
from lakehenry.services.errors import InputError

_AMOUNT_RE = re.compile(r'^\d+(\.\d{1,2})?$')
MIN_AMOUNT = Decimal('0.01')
MAX_AMOUNT = Decimal('1000000')


def parse_amount_cents(raw: str | None) -> int | None:
    """Parse a dollar amount such as ``"50"``, ``"50.00"`` or ``"$1,234.56"``.

    Returns whole cents, or ``None`` when the value is malformed, negative,
    below one cent or above one million dollars.
    """
    cleaned = re.sub(r'[$,\s]', '', raw or '')
    if not _AMOUNT_RE.match(cleaned):
        return None
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return None
    if amount < MIN_AMOUNT or amount > MAX_AMOUNT:
        return None
    return int(amount * 100)


def add_donor(
    *,
    name: str,
    amount_cents: int,
    display_name: str | None = None,
    in_memory_of: str | None = None,
    source: str = 'admin',
) -> Donor:
    donor = Donor(
        name=name,
        amount_cents=amount_cents,
        display_name=display_name,
        in_memory_of=in_memory_of,
        source=source,
    )
    db.session.add(donor)
    db.session.commit()
    current_app.logger.info('Donor %s recorded (%d cents)', donor.id, amount_cents)
    return donor


def delete_donor(raw_id: str | None) -> None:
    try:
        donor_id = int((raw_id or '').strip())
    except ValueError:
        raise InputError('input')
    if donor_id <= 0:
        raise InputError('input')
    db.session.execute(db.delete(Donor).where(Donor.id == donor_id))
    db.session.commit()
    current_app.logger.info('Donor %s deleted', donor_id)


def list_donors() -> list[Donor]:
    return db.session.execute(
        db.select(Donor).order_by(Donor.created_at.desc(), Donor.id.desc())
    ).scalars().all()


def format_cents(amount_cents: int) -> str:
    return f"${amount_cents / 100:,.2f}"


__all__ = ['parse_amount_cents', 'add_donor', 'delete_donor', 'list_donors', 'format_cents']
