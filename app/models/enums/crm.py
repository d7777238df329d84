import enum


class InquirySource(str, enum.Enum):
    website = "website"
    phone = "phone"
    walk_in = "walk_in"
    social_media = "social_media"
    referral = "referral"
    email = "email"


class InquiryPriority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


class InquiryStatus(str, enum.Enum):
    new = "new"
    in_progress = "in_progress"
    responded = "responded"
    resolved = "resolved"
    closed = "closed"


OPEN_INQUIRY_STATUSES = frozenset({InquiryStatus.new, InquiryStatus.in_progress})


class CommunicationType(str, enum.Enum):
    phone = "phone"
    email = "email"
    whatsapp = "whatsapp"
    sms = "sms"
    meeting = "meeting"
    note = "note"


class CommunicationDirection(str, enum.Enum):
    inbound = "inbound"
    outbound = "outbound"
