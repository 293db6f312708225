"""
Backup and restore API endpoints.
"""

import logging
from typing import Any, Dict
from fastapi import APIRouter, Body, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from crewledger.fastapi.dependencies.database import get_sync_db
from crewledger.fastapi.schemas.backup import BackupDocument, RestoreSummary
from crewledger.fastapi.crud.backup import export_backup, restore_backup

logger = logging.getLogger(__name__)

router = APIRouter(tags=["backup"])

REQUIRED_KEYS = ("employees", "pieceRates", "dailyLogs", "payslips")


@router.get("/export", summary="Export Backup")
async def export_all_data(db: Session = Depends(get_sync_db)):
    """
    Download every employee, piece rate, daily log and payslip as one
    JSON document.
    """
    document = export_backup(db)
    filename = f"crewledger-backup-{document.exported_at:%Y-%m-%d}.json"
    return JSONResponse(
        content=document.model_dump(mode="json", by_alias=True),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.post("/restore", response_model=RestoreSummary, summary="Restore Backup")
async def restore_all_data(
    payload: Dict[str, Any] = Body(..., description="A document produced by the export endpoint"),
    db: Session = Depends(get_sync_db)
):
    """
    Replace all data with the contents of a backup.

    Backups written by older versions are accepted; see the restore
    summary for any records that had to be repaired.

    **Errors:**
    - **422**: Invalid backup file format, or records that cannot be
      restored (existing data is kept)
    """
    missing = [key for key in REQUIRED_KEYS if key not in payload]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid backup file format: missing {', '.join(missing)}"
        )

    try:
        document = BackupDocument.model_validate(payload)
    except ValidationError as e:
        logger.warning("Rejected backup document: %d validation errors", e.error_count())
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid backup file format: {e.errors(include_url=False, include_context=False, include_input=False)}"
        )

    return restore_backup(db, document)
