from counseling.models.announcement import (
    Announcement,
    AnnouncementCreate,
    AnnouncementPublic,
    AnnouncementUpdate,
)
from counseling.models.appointment import (
    ACTIVE_STATUSES,
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
    ConsultationMode,
    ConsultationType,
    Gender,
)
from counseling.models.conversation import (
    Conversation,
    ConversationCreate,
    ConversationPublic,
    ConversationWithMessages,
    Message,
    MessagePublic,
)
from counseling.models.schedule import (
    BlockedDate,
    BlockedDateCreate,
    BlockedDatePublic,
    DayAvailability,
    ScheduleSlotRule,
    ScheduleSlotRuleCreate,
    ScheduleSlotRulePublic,
    ScheduleSlotRuleUpdate,
    SlotAvailability,
)

__all__ = [
    "Announcement",
    "AnnouncementCreate",
    "AnnouncementPublic",
    "AnnouncementUpdate",
    "ACTIVE_STATUSES",
    "Appointment",
    "AppointmentCreate",
    "AppointmentPublic",
    "AppointmentStatus",
    "ConsultationMode",
    "ConsultationType",
    "Gender",
    "Conversation",
    "ConversationCreate",
    "ConversationPublic",
    "ConversationWithMessages",
    "Message",
    "MessagePublic",
    "BlockedDate",
    "BlockedDateCreate",
    "BlockedDatePublic",
    "DayAvailability",
    "ScheduleSlotRule",
    "ScheduleSlotRuleCreate",
    "ScheduleSlotRulePublic",
    "ScheduleSlotRuleUpdate",
    "SlotAvailability",
]
