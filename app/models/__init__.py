from app.models.court import Court, CourtAvailabilitySlot
from app.models.recurring_schedule import RecurringSchedule, RecurringScheduleException
from app.models.booking import Booking

# This makes the models directory a Python package and ensures all models are loaded
