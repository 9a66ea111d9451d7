"""Builds services from the Django-backed stores and configured gateways.

Handlers obtain services only through these functions.
"""

from django.conf import settings

from bookings.conf import get_bookings_settings
from bookings.gateways.identity import DjangoUserDirectory
from bookings.gateways.interfaces import IdentityDirectory, Mailer, PaymentGateway
from bookings.gateways.mailer import DjangoMailer
from bookings.gateways.stripe_gateway import StripeGateway
from bookings.services.catalog import SessionCatalog
from bookings.services.follow_up import BookingFollowUp
from bookings.services.ledger import ReservationLedger
from bookings.services.reconciliation import PaymentReconciler
from bookings.services.reminders import ReminderSweep
from bookings.services.rooms import RoomJoinService
from bookings.services.signup import SignupService
from bookings.stores.django_store import (
    DjangoReservationStore,
    DjangoRoomStore,
    DjangoSessionStore,
)


def payment_gateway() -> PaymentGateway:
    config = get_bookings_settings()
    return StripeGateway(
        api_key=config.stripe_secret_key,
        webhook_secret=config.stripe_webhook_secret,
        currency=config.currency,
    )


def mailer() -> Mailer:
    return DjangoMailer(
        site_url=get_bookings_settings().site_url,
        from_email=settings.DEFAULT_FROM_EMAIL,
    )


def identity_directory() -> IdentityDirectory:
    return DjangoUserDirectory()


def catalog() -> SessionCatalog:
    return SessionCatalog(DjangoSessionStore(), DjangoRoomStore())


def ledger() -> ReservationLedger:
    return ReservationLedger(DjangoReservationStore())


def follow_up() -> BookingFollowUp:
    return BookingFollowUp(DjangoReservationStore(), mailer(), identity_directory())


def reconciler() -> PaymentReconciler:
    return PaymentReconciler(
        ledger=ledger(),
        sessions=DjangoSessionStore(),
        reservations=DjangoReservationStore(),
        gateway=payment_gateway(),
        follow_up=follow_up(),
    )


def reminder_sweep() -> ReminderSweep:
    return ReminderSweep(
        reservations=DjangoReservationStore(),
        sessions=DjangoSessionStore(),
        mailer=mailer(),
        batch_size=get_bookings_settings().reminder_batch_size,
    )


def room_join() -> RoomJoinService:
    return RoomJoinService(DjangoSessionStore(), DjangoReservationStore(), DjangoRoomStore())


def signup() -> SignupService:
    return SignupService(
        catalog=catalog(),
        ledger=ledger(),
        reservations=DjangoReservationStore(),
        follow_up=follow_up(),
        gateway=payment_gateway(),
        site_url=get_bookings_settings().site_url,
    )
