from django.contrib.auth import get_user_model

from bookings.domain import ParticipantId
from bookings.gateways.interfaces import IdentityDirectory


class DjangoUserDirectory(IdentityDirectory):
    """Looks participants up as Django users keyed by username."""

    def email_for(self, participant_id: ParticipantId) -> str | None:
        user_model = get_user_model()
        email = (
            user_model.objects.filter(**{user_model.USERNAME_FIELD: participant_id.value})
            .values_list(user_model.get_email_field_name(), flat=True)
            .first()
        )
        return email or None
