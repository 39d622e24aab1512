import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from counseling.models.base import utc_naive_now
from counseling.models.schedule import (
    BlockedDate,
    BlockedDateCreate,
    ScheduleSlotRule,
    ScheduleSlotRuleCreate,
    ScheduleSlotRuleUpdate,
)

logger = logging.getLogger(__name__)

# Monday-Friday; evening hours are online only
DEFAULT_WEEKDAYS = (0, 1, 2, 3, 4)
DEFAULT_ONLINE_TIMES = ("10:00", "11:00", "14:00", "15:00", "16:00", "17:00", "18:00", "19:00")
DEFAULT_OFFLINE_TIMES = ("10:00", "11:00", "14:00", "15:00", "16:00", "17:00")


async def list_rules(session: AsyncSession) -> list[ScheduleSlotRule]:
    result = await session.execute(
        select(ScheduleSlotRule).order_by(ScheduleSlotRule.weekday, ScheduleSlotRule.time_of_day)
    )
    return list(result.scalars().all())


async def get_rule(session: AsyncSession, rule_id: int) -> ScheduleSlotRule | None:
    return await session.get(ScheduleSlotRule, rule_id)


async def find_rule(session: AsyncSession, weekday: int, time_of_day: str) -> ScheduleSlotRule | None:
    result = await session.execute(
        select(ScheduleSlotRule).where(
            ScheduleSlotRule.weekday == weekday,
            ScheduleSlotRule.time_of_day == time_of_day,
        )
    )
    return result.scalar_one_or_none()


async def create_rule(session: AsyncSession, data: ScheduleSlotRuleCreate) -> ScheduleSlotRule | None:
    """Returns None if a rule already exists for (weekday, time_of_day)."""
    if await find_rule(session, data.weekday, data.time_of_day):
        return None
    rule = ScheduleSlotRule.model_validate(data)
    session.add(rule)
    await session.flush()
    await session.refresh(rule)
    return rule


async def update_rule(
    session: AsyncSession, rule: ScheduleSlotRule, data: ScheduleSlotRuleUpdate
) -> ScheduleSlotRule | None:
    """Apply a partial update. Returns None if the new time collides with another rule."""
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    new_time = changes.get("time_of_day")
    if new_time and new_time != rule.time_of_day:
        existing = await find_rule(session, rule.weekday, new_time)
        if existing and existing.id != rule.id:
            return None
    rule.sqlmodel_update(changes)
    rule.updated_at = utc_naive_now()
    session.add(rule)
    await session.flush()
    await session.refresh(rule)
    return rule


async def delete_rule(session: AsyncSession, rule_id: int) -> bool:
    rule = await session.get(ScheduleSlotRule, rule_id)
    if not rule:
        return False
    await session.delete(rule)
    await session.flush()
    return True


async def seed_default_schedule(session: AsyncSession) -> int:
    """Create the default weekly template if no rules exist. Returns rules created."""
    count = (await session.execute(select(func.count()).select_from(ScheduleSlotRule))).scalar_one()
    if count:
        return 0
    created = 0
    for weekday in DEFAULT_WEEKDAYS:
        for slot_time in sorted(set(DEFAULT_ONLINE_TIMES) | set(DEFAULT_OFFLINE_TIMES)):
            session.add(
                ScheduleSlotRule(
                    weekday=weekday,
                    time_of_day=slot_time,
                    online_allowed=slot_time in DEFAULT_ONLINE_TIMES,
                    offline_allowed=slot_time in DEFAULT_OFFLINE_TIMES,
                    active=True,
                )
            )
            created += 1
    await session.flush()
    return created


async def list_blocked_dates(session: AsyncSession) -> list[BlockedDate]:
    result = await session.execute(select(BlockedDate).order_by(BlockedDate.calendar_date))
    return list(result.scalars().all())


async def create_blocked_date(session: AsyncSession, data: BlockedDateCreate) -> BlockedDate | None:
    """Returns None if the date is already blocked."""
    result = await session.execute(
        select(BlockedDate).where(BlockedDate.calendar_date == data.calendar_date)
    )
    if result.scalar_one_or_none():
        return None
    blocked = BlockedDate.model_validate(data)
    session.add(blocked)
    await session.flush()
    await session.refresh(blocked)
    logger.info("Blocked date %s (%s)", blocked.calendar_date, blocked.reason or "no reason")
    return blocked


async def delete_blocked_date(session: AsyncSession, blocked_id: int) -> bool:
    blocked = await session.get(BlockedDate, blocked_id)
    if not blocked:
        return False
    await session.delete(blocked)
    await session.flush()
    return True
