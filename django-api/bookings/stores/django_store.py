"""Django ORM implementations of the stores.

Each method queries the ORM and converts rows to domain models.
"""

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime

from django.db import IntegrityError, transaction
from django.db.models import Case, Count, Q, Value, When

from bookings import models
from bookings.domain import (
    Capacity,
    Milestone,
    Money,
    ParticipantId,
    Reservation,
    ReservationId,
    Room,
    Session,
    SessionDraft,
    SessionId,
    SessionStatus,
)
from bookings.stores.interfaces import ReservationStore, RoomStore, SessionStore

_SENT_FLAG = {
    Milestone.DAY_BEFORE: "reminder_24h_sent",
    Milestone.HOUR_BEFORE: "reminder_1h_sent",
}
_DUE_AT = {
    Milestone.DAY_BEFORE: "reminder_24h_at",
    Milestone.HOUR_BEFORE: "reminder_1h_at",
}
# Rows that cannot be mailed go behind every deliverable one in a batch.
_MISSING_EMAIL_LAST = Case(
    When(Q(participant_email__isnull=True) | Q(participant_email=""), then=Value(1)),
    default=Value(0),
)


def to_domain_session(row: models.Session) -> Session:
    return Session(
        id=SessionId(row.id),
        title=row.title,
        starts_at=row.starts_at,
        duration_minutes=row.duration_minutes,
        seat_cap=Capacity(row.seat_cap),
        status=SessionStatus(row.status),
        price=Money(row.price_cents),
        room_link=row.room_link or None,
        created_at=row.created_at,
    )


def to_domain_reservation(row: models.Reservation) -> Reservation:
    return Reservation(
        id=ReservationId(row.id),
        session_id=SessionId(row.session_id),
        participant_id=ParticipantId(row.participant_id),
        created_at=row.created_at,
        participant_email=row.participant_email or None,
        participant_timezone=row.participant_timezone or None,
        reminder_24h_at=row.reminder_24h_at,
        reminder_24h_sent=row.reminder_24h_sent,
        reminder_1h_at=row.reminder_1h_at,
        reminder_1h_sent=row.reminder_1h_sent,
        confirmation_sent=row.confirmation_sent,
        room_number=row.room_number,
    )


def _draft_fields(draft: SessionDraft) -> dict:
    return {
        "title": draft.title,
        "starts_at": draft.starts_at,
        "duration_minutes": draft.duration_minutes,
        "seat_cap": draft.seat_cap.value,
        "status": draft.status.value,
        "price_cents": draft.price.cents,
        "room_link": draft.room_link,
    }


class DjangoSessionStore(SessionStore):
    """PostgreSQL-backed session store using Django ORM."""

    def get_session(self, session_id: SessionId) -> Session | None:
        row = models.Session.objects.filter(pk=session_id.value).first()
        return to_domain_session(row) if row else None

    def get_sessions(self, session_ids: Iterable[SessionId]) -> dict[SessionId, Session]:
        rows = models.Session.objects.filter(pk__in=[s.value for s in session_ids])
        return {SessionId(row.id): to_domain_session(row) for row in rows}

    def list_scheduled(self, starting_after: datetime) -> list[Session]:
        rows = models.Session.objects.filter(
            status=models.Session.Status.SCHEDULED,
            starts_at__gte=starting_after,
        ).order_by("starts_at")
        return [to_domain_session(row) for row in rows]

    def seats_taken(self, session_ids: Iterable[SessionId]) -> dict[SessionId, int]:
        counts = (
            models.Reservation.objects.filter(
                session_id__in=[s.value for s in session_ids]
            )
            .values("session_id")
            .annotate(taken=Count("id"))
        )
        return {SessionId(row["session_id"]): row["taken"] for row in counts}

    def reserved_by(
        self, participant_id: ParticipantId, session_ids: Iterable[SessionId]
    ) -> set[SessionId]:
        ids = models.Reservation.objects.filter(
            participant_id=participant_id.value,
            session_id__in=[s.value for s in session_ids],
        ).values_list("session_id", flat=True)
        return {SessionId(value) for value in ids}

    def add_sessions(self, drafts: Iterable[SessionDraft]) -> list[Session]:
        with transaction.atomic():
            rows = [models.Session.objects.create(**_draft_fields(d)) for d in drafts]
        return [to_domain_session(row) for row in rows]

    def replace_session(self, session_id: SessionId, draft: SessionDraft) -> Session | None:
        row = models.Session.objects.filter(pk=session_id.value).first()
        if row is None:
            return None
        for name, value in _draft_fields(draft).items():
            setattr(row, name, value)
        row.save()
        return to_domain_session(row)

    def delete_session(self, session_id: SessionId) -> bool:
        row = models.Session.objects.filter(pk=session_id.value).first()
        if row is None:
            return False
        row.delete()
        return True


class DjangoReservationStore(ReservationStore):
    """Reservation store using Django ORM.

    ``lock_session`` takes ``SELECT ... FOR UPDATE`` on the session row so
    concurrent reservation attempts for one session run one at a time.
    """

    @contextmanager
    def lock_session(self, session_id: SessionId) -> Iterator[Session | None]:
        with transaction.atomic():
            row = (
                models.Session.objects.select_for_update()
                .filter(pk=session_id.value)
                .first()
            )
            yield to_domain_session(row) if row else None

    def count_reservations(self, session_id: SessionId) -> int:
        return models.Reservation.objects.filter(session_id=session_id.value).count()

    def find_reservation(
        self, session_id: SessionId, participant_id: ParticipantId
    ) -> Reservation | None:
        row = models.Reservation.objects.filter(
            session_id=session_id.value, participant_id=participant_id.value
        ).first()
        return to_domain_reservation(row) if row else None

    def insert_reservation(
        self, session_id: SessionId, participant_id: ParticipantId, created_at: datetime
    ) -> Reservation | None:
        try:
            # Savepoint so a uniqueness violation leaves the outer transaction usable.
            with transaction.atomic():
                row = models.Reservation.objects.create(
                    session_id=session_id.value,
                    participant_id=participant_id.value,
                    created_at=created_at,
                )
        except IntegrityError:
            return None
        return to_domain_reservation(row)

    def get_reservation(self, reservation_id: ReservationId) -> Reservation | None:
        row = models.Reservation.objects.filter(pk=reservation_id.value).first()
        return to_domain_reservation(row) if row else None

    def list_roster(self, session_id: SessionId) -> list[Reservation]:
        rows = models.Reservation.objects.filter(session_id=session_id.value).order_by(
            "created_at", "id"
        )
        return [to_domain_reservation(row) for row in rows]

    def record_follow_up(
        self,
        reservation_id: ReservationId,
        *,
        email: str | None,
        reminder_24h_at: datetime | None,
        reminder_1h_at: datetime | None,
    ) -> Reservation | None:
        rows = models.Reservation.objects.filter(pk=reservation_id.value)
        with transaction.atomic():
            if email:
                rows.update(participant_email=email)
            # A milestone instant is set once; a replay must not clear a pending one.
            for field, value in (
                ("reminder_24h_at", reminder_24h_at),
                ("reminder_1h_at", reminder_1h_at),
            ):
                if value is not None:
                    rows.filter(**{f"{field}__isnull": True}).update(**{field: value})
        return self.get_reservation(reservation_id)

    def mark_confirmation_sent(self, reservation_id: ReservationId) -> bool:
        updated = models.Reservation.objects.filter(
            pk=reservation_id.value, confirmation_sent=False
        ).update(confirmation_sent=True)
        return updated > 0

    def due_reminders(
        self, milestone: Milestone, now: datetime, limit: int
    ) -> list[Reservation]:
        rows = (
            models.Reservation.objects.filter(
                **{
                    _SENT_FLAG[milestone]: False,
                    f"{_DUE_AT[milestone]}__isnull": False,
                    f"{_DUE_AT[milestone]}__lte": now,
                }
            )
            .order_by(_MISSING_EMAIL_LAST, _DUE_AT[milestone], "id")[:limit]
        )
        return [to_domain_reservation(row) for row in rows]

    def mark_reminders_sent(
        self, reservation_id: ReservationId, milestones: Iterable[Milestone]
    ) -> bool:
        milestones = list(milestones)
        if not milestones:
            return False
        updated = models.Reservation.objects.filter(
            pk=reservation_id.value, **{_SENT_FLAG[milestones[0]]: False}
        ).update(**{_SENT_FLAG[m]: True for m in milestones})
        return updated > 0

    def freeze_room(self, reservation_id: ReservationId, room_number: int) -> int:
        models.Reservation.objects.filter(
            pk=reservation_id.value, room_number__isnull=True
        ).update(room_number=room_number)
        return (
            models.Reservation.objects.filter(pk=reservation_id.value)
            .values_list("room_number", flat=True)
            .get()
        )

    def set_participant_timezone(
        self, reservation_id: ReservationId, timezone_name: str
    ) -> None:
        models.Reservation.objects.filter(pk=reservation_id.value).update(
            participant_timezone=timezone_name
        )


class DjangoRoomStore(RoomStore):
    def get_room(self, room_number: int) -> Room | None:
        row = models.Room.objects.filter(room_number=room_number).first()
        if row is None or not row.link:
            return None
        return Room(room_number=row.room_number, link=row.link, label=row.label)
