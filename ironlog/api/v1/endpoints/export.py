"""Export (canonical JSON, simplified JSON, CSV) and canonical import."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from ironlog.db.base import utcnow
from ironlog.db.session import get_db
from ironlog.schemas.canonical import CanonicalExport, ImportResult
from ironlog.services import export

router = APIRouter()


@router.get("/canonical", response_model=CanonicalExport)
async def export_canonical(db: AsyncSession = Depends(get_db)):
    """Full-fidelity, version-tagged export suitable for re-import."""
    return await export.export_canonical(db)


@router.get("/simple")
async def export_simplified(db: AsyncSession = Depends(get_db)):
    """Flattened JSON; computed fields carry a _calc suffix."""
    return await export.export_simplified(db)


@router.get("/csv")
async def export_csv(db: AsyncSession = Depends(get_db)):
    """One row per set; derived columns are marked [calc]."""
    content = await export.export_csv(db)
    filename = f"ironlog-workouts-{utcnow().date().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import", response_model=ImportResult)
async def import_canonical(payload: Any = Body(...), db: AsyncSession = Depends(get_db)):
    """Import a canonical export (or a bare list of workouts); bad records are reported, not fatal."""
    return await export.import_canonical_workouts(db, payload)
