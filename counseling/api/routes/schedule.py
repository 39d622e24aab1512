from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from counseling.api.deps import get_session, require_admin
from counseling.models.appointment import ConsultationMode
from counseling.models.schedule import (
    BlockedDateCreate,
    BlockedDatePublic,
    DayAvailability,
    ScheduleSlotRuleCreate,
    ScheduleSlotRulePublic,
    ScheduleSlotRuleUpdate,
)
from counseling.services import schedule_service
from counseling.services.availability import slots_for_date

router = APIRouter(tags=["schedule"])


@router.get("/schedule/available/{date_param}", response_model=DayAvailability)
async def available_slots(
    date_param: date,
    mode: ConsultationMode | None = Query(None),
    session: AsyncSession = Depends(get_session),
) -> DayAvailability:
    """Slots configured for the date's weekday, filtered by mode, with booking state."""
    return await slots_for_date(session, date_param, mode)


@router.get(
    "/schedule-settings",
    response_model=list[ScheduleSlotRulePublic],
    dependencies=[Depends(require_admin)],
)
async def list_schedule_settings(
    session: AsyncSession = Depends(get_session),
) -> list[ScheduleSlotRulePublic]:
    return await schedule_service.list_rules(session)


@router.post(
    "/schedule-settings",
    response_model=ScheduleSlotRulePublic,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_schedule_setting(
    body: ScheduleSlotRuleCreate,
    session: AsyncSession = Depends(get_session),
) -> ScheduleSlotRulePublic:
    rule = await schedule_service.create_rule(session, body)
    if not rule:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A slot already exists for this weekday and time",
        )
    return rule


@router.patch(
    "/schedule-settings/{rule_id}",
    response_model=ScheduleSlotRulePublic,
    dependencies=[Depends(require_admin)],
)
async def update_schedule_setting(
    rule_id: int,
    body: ScheduleSlotRuleUpdate,
    session: AsyncSession = Depends(get_session),
) -> ScheduleSlotRulePublic:
    rule = await schedule_service.get_rule(session, rule_id)
    if not rule:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule setting not found")
    updated = await schedule_service.update_rule(session, rule, body)
    if not updated:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A slot already exists for this weekday and time",
        )
    return updated


@router.delete(
    "/schedule-settings/{rule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_schedule_setting(
    rule_id: int,
    session: AsyncSession = Depends(get_session),
) -> None:
    if not await schedule_service.delete_rule(session, rule_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule setting not found")


@router.get(
    "/blocked-dates",
    response_model=list[BlockedDatePublic],
    dependencies=[Depends(require_admin)],
)
async def list_blocked_dates(
    session: AsyncSession = Depends(get_session),
) -> list[BlockedDatePublic]:
    return await schedule_service.list_blocked_dates(session)


@router.post(
    "/blocked-dates",
    response_model=BlockedDatePublic,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def create_blocked_date(
    body: BlockedDateCreate,
    session: AsyncSession = Depends(get_session),
) -> BlockedDatePublic:
    blocked = await schedule_service.create_blocked_date(session, body)
    if not blocked:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="This date is already blocked")
    return blocked


@router.delete(
    "/blocked-dates/{blocked_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def delete_blocked_date(
    blocked_id: int,
    session: AsyncSession = Depends(get_session),
) -> None:
    if not await schedule_service.delete_blocked_date(session, blocked_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blocked date not found")
