from datetime import date
from uuid import UUID


TENANT_ID = UUID('0193a1b2-0000-7000-8000-000000000001')
OTHER_TENANT_ID = UUID('0193a1b2-0000-7000-8000-000000000099')
CUSTOMER_ID = UUID('0193a1b2-0000-7000-8000-0000000000c1')
SLOT_DATE = date(2030, 5, 17)
UNIT_PRICE = 500
CUSTOMER_NAME = 'Mei Chen'
CUSTOMER_PHONE = '+886912345678'
SESSION_ID = 'session_test'

# Routes
LOCK_ACQUIRE = '/api/bookings/lock'
LOCK_VALIDATE = '/api/bookings/lock/{lock_id}/validate'
LOCK_RELEASE = '/api/bookings/lock/{lock_id}/release'
BOOKING_CREATE = '/api/bookings/create'
BOOKING_CREATE_BULK = '/api/bookings/create-bulk'
BOOKING_CANCEL = '/api/bookings/{booking_id}'
SLOTS_LIST = '/api/bookings/slots'
PACKAGE_CAPACITY = '/api/packages/capacity'
