# Path: cozy_corner/utils/notification_service.py
"""
Customer notifications. Every notification is stored in-app and, when
configured, also sent by email (SMTP) and SMS (Twilio). Delivery is best
effort: failures are logged and never interrupt the calling flow.
"""
import logging
import smtplib
from html import escape
from datetime import datetime
from email.message import EmailMessage
from typing import Optional

from sqlalchemy.orm import Session
from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from ..config import settings
from ..models.notification import Notification, NotificationType
from ..models.order import Order, OrderStatus, OrderType
from ..models.reservation import Reservation
from ..models.user import User

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, html: str) -> bool:
    """Send an HTML email. Returns False instead of raising."""
    if not settings.smtp_enabled:
        logger.debug(f"SMTP not configured, skipping email to {to}")
        return False
    message = EmailMessage()
    message["From"] = settings.MAIL_FROM
    message["To"] = to
    message["Subject"] = subject
    message.set_content("This message requires an HTML capable mail client.")
    message.add_alternative(html, subtype="html")
    try:
        with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
            smtp.login(settings.SMTP_USER, settings.SMTP_PASS)
            smtp.send_message(message)
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Email sending failed to {to}: {e}")
        return False


def send_sms(phone_number: str, body: str) -> bool:
    """Send an SMS through Twilio. Returns False instead of raising."""
    if not settings.twilio_enabled or not phone_number:
        return False
    try:
        client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        message = client.messages.create(
            from_=settings.TWILIO_PHONE_NUMBER,
            body=body,
            to=phone_number,
        )
        logger.info(f"SMS sent to {phone_number}, SID: {message.sid}")
        return True
    except TwilioRestException as e:
        logger.error(f"Twilio error: {e.code} - {e.msg}")
        return False


def _money(amount) -> str:
    return f"${float(amount):.2f}"


class NotificationService:
    """Service to handle notification creation and delivery"""

    @staticmethod
    def notify(
        db: Session,
        user: User,
        notification_type: NotificationType,
        title: str,
        message: str,
        html: Optional[str] = None,
        order_id: Optional[int] = None,
        reservation_id: Optional[int] = None,
    ) -> Optional[Notification]:
        """
        Record an in-app notification and push it out by email/SMS.

        Args:
            db: Database session
            user: Recipient
            notification_type: Kind of notification
            title: Short title, also the email subject
            message: Plain text body, also the SMS body
            html: Optional HTML email body (defaults to the message)
            order_id / reservation_id: Entity that triggered it

        Returns:
            Created Notification object or None if it could not be stored
        """
        notification = None
        try:
            notification = Notification(
                user_id=user.id,
                order_id=order_id,
                reservation_id=reservation_id,
                notification_type=notification_type,
                title=title,
                message=message,
                is_read=False,
                created_at=datetime.utcnow(),
            )
            db.add(notification)
            db.commit()
            db.refresh(notification)
        except Exception:
            logger.exception(f"Could not store notification for user {user.id}")
            db.rollback()
            notification = None

        try:
            send_email(user.email, f"{title} - Cozy Corner Cafe",
                       html or f"<p>{escape(message)}</p>")
            send_sms(user.phone_number, message)
        except Exception:
            logger.exception(f"Could not deliver notification to user {user.id}")

        return notification

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    @staticmethod
    def order_confirmation(db: Session, order: Order) -> Optional[Notification]:
        fulfilment = "delivery" if order.order_type == OrderType.delivery else "pickup"
        html = f"""
            <h2>Order Received!</h2>
            <p>Dear {escape(order.user.name)},</p>
            <p>Your order #{order.id} for {fulfilment} has been received.</p>
            <p>Total Amount: {_money(order.total_amount)}</p>
        """
        return NotificationService.notify(
            db, order.user, NotificationType.order_confirmation,
            title="Order Confirmation",
            message=f"Your order #{order.id} ({fulfilment}) was received. Total: {_money(order.total_amount)}",
            html=html,
            order_id=order.id,
        )

    @staticmethod
    def order_status_update(db: Session, order: Order) -> Optional[Notification]:
        if order.status == OrderStatus.cancelled:
            return NotificationService.notify(
                db, order.user, NotificationType.order_cancelled,
                title="Order Cancelled",
                message=f"Your order #{order.id} has been cancelled.",
                order_id=order.id,
            )
        return NotificationService.notify(
            db, order.user, NotificationType.order_status_update,
            title="Order Update",
            message=f"Your order #{order.id} is now {order.status.value}.",
            order_id=order.id,
        )

    @staticmethod
    def payment_update(db: Session, order: Order) -> Optional[Notification]:
        return NotificationService.notify(
            db, order.user, NotificationType.payment_update,
            title="Payment Update",
            message=f"Payment for order #{order.id} is {order.payment_status.value}.",
            order_id=order.id,
        )

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    @staticmethod
    def reservation_confirmation(db: Session, reservation: Reservation) -> Optional[Notification]:
        html = f"""
            <h2>Reservation Received!</h2>
            <p>Dear {escape(reservation.user.name)},</p>
            <p>Your reservation details:</p>
            <ul>
                <li>Date: {reservation.date.isoformat()}</li>
                <li>Time: {reservation.time}</li>
                <li>Party Size: {reservation.party_size}</li>
            </ul>
            <p>We look forward to serving you!</p>
        """
        return NotificationService.notify(
            db, reservation.user, NotificationType.reservation_confirmation,
            title="Reservation Confirmation",
            message=(f"Reservation #{reservation.id} for {reservation.party_size} on "
                     f"{reservation.date.isoformat()} at {reservation.time}."),
            html=html,
            reservation_id=reservation.id,
        )

    @staticmethod
    def reservation_update(db: Session, reservation: Reservation) -> Optional[Notification]:
        return NotificationService.notify(
            db, reservation.user, NotificationType.reservation_update,
            title="Reservation Updated",
            message=(f"Reservation #{reservation.id} is now {reservation.status.value}: "
                     f"{reservation.date.isoformat()} at {reservation.time}, "
                     f"party of {reservation.party_size}."),
            reservation_id=reservation.id,
        )

    @staticmethod
    def reservation_cancelled(db: Session, reservation: Reservation) -> Optional[Notification]:
        return NotificationService.notify(
            db, reservation.user, NotificationType.reservation_cancelled,
            title="Reservation Cancelled",
            message=(f"Reservation #{reservation.id} on {reservation.date.isoformat()} "
                     f"at {reservation.time} has been cancelled."),
            reservation_id=reservation.id,
        )

    # ------------------------------------------------------------------
    # In-app inbox
    # ------------------------------------------------------------------

    @staticmethod
    def get_user_notifications(
        db: Session, user_id: int, unread_only: bool = False, limit: int = 50
    ):
        query = db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read == False)  # noqa: E712
        return query.order_by(Notification.created_at.desc(),
                              Notification.id.desc()).limit(limit).all()

    @staticmethod
    def mark_all_read(db: Session, user_id: int) -> int:
        notifications = db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.is_read == False  # noqa: E712
        ).all()
        for notification in notifications:
            notification.mark_as_read()
        db.commit()
        return len(notifications)
