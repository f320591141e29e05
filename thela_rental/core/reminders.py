import logging
from datetime import datetime, time
from typing import Callable, Dict, Iterable, List, Optional

from thela_rental.core.errors import SchedulingError
from thela_rental.core.models import RentalRecord, RentStatus
from thela_rental.core.services import NotificationRequest, NotificationService
from thela_rental.core.utils import parse_date


class ReminderScheduler:
    """Turns a record's due date into a one-shot local notification."""

    def __init__(
        self,
        notification_service: NotificationService,
        reminder_hour: int = 9,
        reminder_minute: int = 0,
        currency_symbol: str = "₹",
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.notification_service = notification_service
        self.reminder_time = time(reminder_hour, reminder_minute, 0, 0)
        self.currency_symbol = currency_symbol
        self._clock = clock
        # cart id -> notification id handed back by the service
        self._pending: Dict[str, str] = {}

    def build_request(self, record: RentalRecord) -> Optional[NotificationRequest]:
        due = parse_date(record.due_date)
        if due is None:
            return None
        return NotificationRequest(
            title=f"Rent Due: {record.cart_id}",
            body=f"Renter: {record.renter_name}, {self.currency_symbol}{record.monthly_rent}",
            trigger=datetime.combine(due, self.reminder_time),
        )

    def schedule(self, record: RentalRecord) -> Optional[NotificationRequest]:
        """
        Request a reminder at the configured time on the record's due date.

        Returns None (and does nothing) when the due date is empty or cannot be
        parsed. A reminder already queued for the same cart is replaced, or kept
        when the service rejects the new one.

        :raises SchedulingError: If the notification service rejects the request.
        """
        request = self.build_request(record)
        if request is None:
            return None

        try:
            notification_id = self.notification_service.schedule_notification(request)
        except SchedulingError:
            raise
        except Exception as e:
            raise SchedulingError(f"Could not schedule reminder for cart {record.cart_id}: {e}") from e

        # Replace the previous reminder only once the new one is queued.
        self.cancel(record.cart_id)
        self._pending[record.cart_id] = notification_id
        logging.info(f"Scheduled rent reminder for cart {record.cart_id} at {request.trigger:%Y-%m-%d %H:%M}.")
        return request

    def cancel(self, cart_id: str) -> bool:
        notification_id = self._pending.pop(cart_id, None)
        if notification_id is None:
            return False
        try:
            self.notification_service.cancel_notification(notification_id)
        except Exception as e:
            logging.warning(f"Could not cancel reminder for cart {cart_id}: {e}")
            return False
        return True

    def schedule_all(self, records: Iterable[RentalRecord]) -> List[NotificationRequest]:
        """Re-arm reminders for unpaid records whose reminder time is still ahead."""
        now = self._clock()
        scheduled = []
        for record in records:
            if record.rent_status != RentStatus.PENDING:
                continue
            request = self.build_request(record)
            if request is None or request.trigger <= now:
                continue
            try:
                scheduled.append(self.schedule(record))
            except SchedulingError as e:
                logging.warning(str(e))
        return scheduled

    def pending_cart_ids(self) -> List[str]:
        return list(self._pending)
