"""
Piece rate CRUD operations.
"""

from uuid import UUID
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import asc

from crewledger.fastapi.models.piece_rate import PieceRate
from crewledger.fastapi.schemas.piece_rate import PieceRateCreate, PieceRateUpdate
from crewledger.fastapi.core.utils import normalize_name
from crewledger.payroll import types as ledger


def piece_rate_to_snapshot(piece_rate: PieceRate) -> ledger.PieceRate:
    return ledger.PieceRate(
        id=piece_rate.id,
        task_name=piece_rate.task_name,
        rate=piece_rate.rate,
    )


def create_piece_rate(db: Session, piece_rate_data: PieceRateCreate) -> PieceRate:
    """Add a rate to the catalog. Duplicate task names are allowed."""
    db_piece_rate = PieceRate(
        task_name=normalize_name(piece_rate_data.task_name),
        rate=piece_rate_data.rate
    )

    db.add(db_piece_rate)
    db.commit()
    db.refresh(db_piece_rate)

    return db_piece_rate


def get_piece_rate(db: Session, piece_rate_id: UUID) -> Optional[PieceRate]:
    return db.query(PieceRate).filter(PieceRate.id == piece_rate_id).first()


def get_piece_rates(db: Session) -> List[PieceRate]:
    return db.query(PieceRate).order_by(asc(PieceRate.task_name), asc(PieceRate.created_at)).all()


def update_piece_rate(db: Session, piece_rate_id: UUID, piece_rate_update: PieceRateUpdate) -> Optional[PieceRate]:
    """
    Edit a catalog rate.

    Daily tasks already recorded keep their own copy of the name and rate,
    so nothing else changes.

    Returns:
        Updated rate if found, None otherwise
    """
    db_piece_rate = get_piece_rate(db, piece_rate_id)
    if not db_piece_rate:
        return None

    update_data = piece_rate_update.model_dump(exclude_unset=True, exclude_none=True)
    if "task_name" in update_data:
        update_data["task_name"] = normalize_name(update_data["task_name"])
    for field, value in update_data.items():
        setattr(db_piece_rate, field, value)

    db.commit()
    db.refresh(db_piece_rate)

    return db_piece_rate


def delete_piece_rate(db: Session, piece_rate_id: UUID) -> bool:
    """
    Remove a rate from the catalog.

    Recorded tasks lose their catalog reference but keep their copied
    name and rate.
    """
    db_piece_rate = get_piece_rate(db, piece_rate_id)
    if not db_piece_rate:
        return False

    db.delete(db_piece_rate)
    db.commit()

    return True
