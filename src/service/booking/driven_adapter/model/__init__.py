from src.service.booking.driven_adapter.model.booking_lock_model import BookingLockModel
from src.service.booking.driven_adapter.model.booking_model import BookingModel
from src.service.booking.driven_adapter.model.package_subscription_model import (
    PackageExhaustionNotificationModel,
    PackageSubscriptionModel,
    PackageSubscriptionUsageModel,
)
from src.service.booking.driven_adapter.model.service_model import ServiceModel
from src.service.booking.driven_adapter.model.slot_model import SlotModel


__all__ = [
    'BookingLockModel',
    'BookingModel',
    'PackageExhaustionNotificationModel',
    'PackageSubscriptionModel',
    'PackageSubscriptionUsageModel',
    'ServiceModel',
    'SlotModel',
]
