from enum import StrEnum


class SubscriptionStatus(StrEnum):
    ACTIVE = 'active'
    CANCELLED = 'cancelled'
    EXPIRED = 'expired'
