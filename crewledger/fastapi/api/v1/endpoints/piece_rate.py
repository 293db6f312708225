"""
Piece rate catalog API endpoints.
"""

from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from crewledger.fastapi.dependencies.database import get_sync_db
from crewledger.fastapi.schemas.piece_rate import (
    PieceRateCreate, PieceRateRead, PieceRateUpdate, PieceRateListResponse
)
from crewledger.fastapi.crud.piece_rate import (
    create_piece_rate, get_piece_rate, get_piece_rates, update_piece_rate, delete_piece_rate
)


router = APIRouter(tags=["piece-rates"])


@router.post("/", response_model=PieceRateRead, status_code=status.HTTP_201_CREATED, summary="Create Piece Rate")
async def create_new_piece_rate(
    piece_rate_data: PieceRateCreate,
    db: Session = Depends(get_sync_db)
):
    """
    Add a task and its rate per unit to the catalog.

    **Errors:**
    - **422**: Empty task name or non-positive rate
    """
    return PieceRateRead.model_validate(create_piece_rate(db, piece_rate_data))


@router.get("/", response_model=PieceRateListResponse, summary="List Piece Rates")
async def list_piece_rates(db: Session = Depends(get_sync_db)):
    piece_rates = get_piece_rates(db)
    return PieceRateListResponse(
        piece_rates=[PieceRateRead.model_validate(r) for r in piece_rates],
        total=len(piece_rates)
    )


@router.get("/{piece_rate_id}", response_model=PieceRateRead, summary="Get Piece Rate by ID")
async def get_piece_rate_by_id(
    piece_rate_id: UUID,
    db: Session = Depends(get_sync_db)
):
    piece_rate = get_piece_rate(db, piece_rate_id)
    if not piece_rate:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Piece rate not found"
        )

    return PieceRateRead.model_validate(piece_rate)


@router.put("/{piece_rate_id}", response_model=PieceRateRead, summary="Update Piece Rate")
async def update_piece_rate_info(
    piece_rate_id: UUID,
    piece_rate_update: PieceRateUpdate,
    db: Session = Depends(get_sync_db)
):
    """
    Edit a catalog rate.

    Tasks already recorded on daily logs keep the name and rate they were
    entered with.

    **Errors:**
    - **404**: Piece rate not found
    """
    piece_rate = update_piece_rate(db, piece_rate_id, piece_rate_update)
    if not piece_rate:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Piece rate not found"
        )

    return PieceRateRead.model_validate(piece_rate)


@router.delete("/{piece_rate_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Piece Rate")
async def delete_piece_rate_by_id(
    piece_rate_id: UUID,
    db: Session = Depends(get_sync_db)
):
    if not delete_piece_rate(db, piece_rate_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Piece rate not found"
        )
