from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shift_roster.core.database import get_db
from shift_roster.schemas.roster import (
    BulkDeployRequest,
    DeployRequest,
    PreviewRequest,
    TemplateBulkDelete,
    TemplateBulkUpsert,
    WeeklyTemplateOut,
)
from shift_roster.scheduling.types import RosterRow
from shift_roster.services.deploy import bulk_deploy_month, deploy_month
from shift_roster.services.preview import preview_month
from shift_roster.services.stores import SqlShiftStore, SqlTemplateStore
from shift_roster.services.validators import validate_client_id, validate_template_rows

router = APIRouter()


def get_template_store(db: Session = Depends(get_db)) -> SqlTemplateStore:
    return SqlTemplateStore(db)


def get_shift_store(db: Session = Depends(get_db)) -> SqlShiftStore:
    return SqlShiftStore(db)


def _row_out(row: RosterRow) -> dict:
    out = asdict(row)
    out["date"] = out.pop("shift_date")
    return out


@router.get("/templates", response_model=list[WeeklyTemplateOut])
def list_templates(
    client_id: str = Query(...),
    templates: SqlTemplateStore = Depends(get_template_store),
):
    return templates.list_templates(validate_client_id(client_id))


@router.post("/templates/bulk_upsert")
def bulk_upsert_templates(req: TemplateBulkUpsert, templates: SqlTemplateStore = Depends(get_template_store)):
    validate_template_rows(req.rows)
    count = templates.bulk_upsert([r.model_dump() for r in req.rows])
    return {"ok": True, "upserted": count}


@router.post("/templates/bulk_delete")
def bulk_delete_templates(req: TemplateBulkDelete, templates: SqlTemplateStore = Depends(get_template_store)):
    if not req.template_ids:
        return {"ok": True, "deleted": 0}
    return {"ok": True, "deleted": templates.bulk_delete(req.template_ids)}


@router.post("/preview")
def preview(
    req: PreviewRequest,
    templates: SqlTemplateStore = Depends(get_template_store),
    shifts: SqlShiftStore = Depends(get_shift_store),
):
    rows = preview_month(
        templates,
        shifts,
        client_id=req.client_id,
        month=req.month,
        policy=req.policy,
        recurrence_enabled=req.recurrence_enabled,
    )
    return [_row_out(r) for r in rows]


@router.post("/deploy")
def deploy(
    req: DeployRequest,
    templates: SqlTemplateStore = Depends(get_template_store),
    shifts: SqlShiftStore = Depends(get_shift_store),
):
    return deploy_month(templates, shifts, req.client_id, req.month, req.policy).to_dict()


@router.post("/bulk_deploy")
def bulk_deploy(
    req: BulkDeployRequest,
    templates: SqlTemplateStore = Depends(get_template_store),
    shifts: SqlShiftStore = Depends(get_shift_store),
):
    return bulk_deploy_month(templates, shifts, req.month, req.policy).to_dict()
