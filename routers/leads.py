# routers/leads.py

from collections import Counter
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends

from core.errors import ApiError, NotFoundError, ValidationError, handle_supabase_error
from core.logging_config import logger
from core.supabase_client import get_supabase_client
from core.utils import ok, sanitize
from dependencies.auth import CurrentUser, requires_sales
from models.enums import LeadPriority, LeadSource, LeadStage
from models.lead import LeadCallLog, LeadCreate, LeadUpdate


router = APIRouter(
    prefix="/leads",
    tags=["Leads"],
)


def _client():
    client = get_supabase_client()
    if not client:
        raise ApiError(500, "Supabase client not configured")
    return client


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _own_lead(client, lead_id: str, user: CurrentUser, select: str = "*") -> dict:
    """Leads are private to the sales executive who owns them."""
    result = (
        client.table("leads")
        .select(select)
        .eq("id", lead_id)
        .eq("sales_executive_id", user.id)
        .eq("company_id", user.company_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise NotFoundError("Lead not found or access denied")
    return result.data[0]


def stage_timestamps(stage: Optional[str], existing: dict) -> dict:
    """converted_at / lost_at are stamped once, the first time a lead reaches won / lost."""
    if stage == LeadStage.won.value and not existing.get("converted_at"):
        return {"converted_at": _now()}
    if stage == LeadStage.lost.value and not existing.get("lost_at"):
        return {"lost_at": _now()}
    return {}


def append_call_note(existing_notes: Optional[str], note: Optional[str], when: Optional[datetime] = None) -> Optional[str]:
    if not note or not note.strip():
        return existing_notes
    when = when or datetime.now(timezone.utc)
    entry = f"[{when.strftime('%b %d %H:%M')}] {note.strip()}"
    return f"{existing_notes}\n{entry}" if existing_notes else entry


def summarize_leads(leads) -> dict:
    stats = {
        "total": len(leads),
        "byStage": dict(Counter(lead.get("stage") for lead in leads)),
        "byPriority": dict(Counter(lead.get("priority") for lead in leads)),
        "totalValue": 0.0,
        "wonValue": 0.0,
        "lostValue": 0.0,
    }
    for lead in leads:
        value = float(lead.get("estimated_value") or 0)
        stats["totalValue"] += value
        if lead.get("stage") == LeadStage.won.value:
            stats["wonValue"] += value
        elif lead.get("stage") == LeadStage.lost.value:
            stats["lostValue"] += value
    return stats


# ============================================================
# STATS / FOLLOW-UPS (declared before /{lead_id})
# ============================================================
@router.get("/stats", summary="Lead statistics for the dashboard")
def lead_stats(current_user: CurrentUser = Depends(requires_sales)):
    try:
        result = (
            _client().table("leads")
            .select("stage, priority, estimated_value")
            .eq("sales_executive_id", current_user.id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Error fetching lead stats")

    return ok(summarize_leads(result.data or []))


@router.get("/follow-ups", summary="Open leads whose follow-up is due")
def follow_up_reminders(current_user: CurrentUser = Depends(requires_sales)):
    end_of_today = datetime.now(timezone.utc).replace(hour=23, minute=59, second=59, microsecond=0)
    try:
        result = (
            _client().table("leads")
            .select("*")
            .eq("sales_executive_id", current_user.id)
            .eq("company_id", current_user.company_id)
            .not_.in_("stage", [LeadStage.won.value, LeadStage.lost.value])
            .not_.is_("next_follow_up", "null")
            .lte("next_follow_up", end_of_today.isoformat())
            .order("next_follow_up")
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Error fetching follow-up reminders")

    return ok(result.data or [])


# ============================================================
# LIST
# ============================================================
@router.get("/", summary="List my leads")
def list_leads(
    stage: Optional[LeadStage] = None,
    priority: Optional[LeadPriority] = None,
    source: Optional[LeadSource] = None,
    search: Optional[str] = None,
    current_user: CurrentUser = Depends(requires_sales),
):
    query = (
        _client().table("leads")
        .select("*")
        .eq("sales_executive_id", current_user.id)
        .eq("company_id", current_user.company_id)
    )

    if stage:
        query = query.eq("stage", stage.value)
    if priority:
        query = query.eq("priority", priority.value)
    if source:
        query = query.eq("source", source.value)
    if search:
        term = f"%{search}%"
        query = query.or_(
            f"company_name.ilike.{term},contact_name.ilike.{term},contact_email.ilike.{term},title.ilike.{term}"
        )

    try:
        result = query.order("created_at", desc=True).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Error fetching leads")

    return ok(result.data or [])


# ============================================================
# GET
# ============================================================
@router.get("/{lead_id}", summary="Get lead")
def get_lead(lead_id: str, current_user: CurrentUser = Depends(requires_sales)):
    return ok(_own_lead(_client(), lead_id, current_user))


# ============================================================
# CREATE
# ============================================================
@router.post("/", status_code=201, summary="Create lead")
def create_lead(payload: LeadCreate, current_user: CurrentUser = Depends(requires_sales)):
    data = sanitize(payload.model_dump(mode="json"))
    data.update({
        "sales_executive_id": current_user.id,
        "company_id": current_user.company_id,
    })
    data.update(stage_timestamps(data.get("stage"), {}))

    try:
        result = _client().table("leads").insert(data).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Error creating lead")

    return ok(result.data[0] if result.data else None)


# ============================================================
# UPDATE
# ============================================================
@router.put("/{lead_id}", summary="Update lead")
def update_lead(lead_id: str, payload: LeadUpdate, current_user: CurrentUser = Depends(requires_sales)):
    client = _client()
    existing = _own_lead(client, lead_id, current_user, "id, converted_at, lost_at")

    data = sanitize(payload.model_dump(mode="json", exclude_unset=True))
    if not data:
        raise ValidationError("No fields to update")
    data.update(stage_timestamps(data.get("stage"), existing))

    try:
        result = (
            client.table("leads")
            .update(data)
            .eq("id", lead_id)
            .eq("sales_executive_id", current_user.id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Error updating lead")

    return ok((result.data or [None])[0])


# ============================================================
# DELETE
# ============================================================
@router.delete("/{lead_id}", summary="Delete lead")
def delete_lead(lead_id: str, current_user: CurrentUser = Depends(requires_sales)):
    client = _client()
    _own_lead(client, lead_id, current_user, "id")

    try:
        (
            client.table("leads")
            .delete()
            .eq("id", lead_id)
            .eq("sales_executive_id", current_user.id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Error deleting lead")

    return ok(message="Lead deleted successfully")


# ============================================================
# LOG CALL
# ============================================================
@router.post("/{lead_id}/log-call", summary="Log a call against a lead")
def log_call(lead_id: str, payload: Optional[LeadCallLog] = None, current_user: CurrentUser = Depends(requires_sales)):
    client = _client()
    existing = _own_lead(client, lead_id, current_user, "id, notes")

    update = {"last_follow_up": _now()}
    notes = append_call_note(existing.get("notes"), payload.note if payload else None)
    if notes != existing.get("notes"):
        update["notes"] = notes

    try:
        result = (
            client.table("leads")
            .update(update)
            .eq("id", lead_id)
            .eq("sales_executive_id", current_user.id)
            .eq("company_id", current_user.company_id)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Error logging call")

    logger.info(f"Call logged on lead {lead_id} by {current_user.id}")
    return ok((result.data or [None])[0], message="Call logged successfully")
