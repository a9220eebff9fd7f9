"""Back-office forms: login, donors, events, posters and photo moderation."""

from __future__ import annotations

from urllib.parse import urlsplit

from flask_wtf.file import FileField
from wtforms import BooleanField, HiddenField, PasswordField, StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Length, Optional, ValidationError

from lakehenry.forms import PlainForm, none_if_blank, strip_filter
from lakehenry.models import EventKind


def http_url(message: str = 'url'):
    """Accept only absolute ``http``/``https`` URLs."""

    def _check(form, field):
        if not field.data:
            return
        parts = urlsplit(field.data)
        if parts.scheme not in ('http', 'https') or not parts.netloc:
            raise ValidationError(message)

    return _check


class LoginForm(PlainForm):
    username = StringField("Username", filters=[strip_filter])
    password = PasswordField("Password")
    next = HiddenField(filters=[strip_filter])


class DonorForm(PlainForm):
    """Donor entry; the amount is parsed separately so ``$1,234.56`` is accepted."""

    name = StringField(
        "Name",
        filters=[strip_filter],
        validators=[Length(min=2, max=200, message='name')],
    )
    amount = StringField("Amount", filters=[strip_filter])
    displayName = StringField(
        "Display name",
        filters=[none_if_blank],
        validators=[Optional(), Length(max=200, message='input')],
    )
    inMemoryOf = StringField(
        "In memory of",
        filters=[none_if_blank],
        validators=[Optional(), Length(max=200, message='input')],
    )


class EventForm(PlainForm):
    id = HiddenField(filters=[strip_filter])
    title = StringField(
        "Title",
        filters=[strip_filter],
        validators=[DataRequired(message='invalid'), Length(max=200, message='invalid')],
    )
    kind = StringField(
        "Kind",
        filters=[strip_filter],
        validators=[AnyOf([kind.value for kind in EventKind], message='invalid')],
    )
    status = StringField("Status", filters=[strip_filter])
    is_tbd = BooleanField("Date to be announced")
    date_start = StringField("Starts", filters=[strip_filter])
    date_end = StringField("Ends", filters=[strip_filter])
    location = StringField(
        "Location",
        filters=[none_if_blank],
        validators=[Optional(), Length(max=255, message='invalid')],
    )
    summary = TextAreaField("Summary", filters=[none_if_blank])
    url = StringField(
        "Link",
        filters=[none_if_blank],
        validators=[Optional(), Length(max=1024, message='url'), http_url()],
    )
    url_label = StringField(
        "Link label",
        filters=[none_if_blank],
        validators=[Optional(), Length(max=120, message='invalid')],
    )

    @property
    def published(self) -> bool:
        return self.status.data == 'published'


class PosterForm(PlainForm):
    id = HiddenField(filters=[strip_filter])
    alt = StringField(
        "Poster description",
        filters=[strip_filter],
        validators=[Length(min=5, max=500, message='alt')],
    )
    poster = FileField("Poster image")


class ApprovePhotoForm(PlainForm):
    id = HiddenField(filters=[strip_filter])
    alt = StringField(
        "Alt text",
        filters=[strip_filter],
        validators=[Length(min=5, max=500, message='alt')],
    )
    title = StringField("Title", filters=[none_if_blank], validators=[Optional(), Length(max=200, message='input')])
    caption = TextAreaField("Caption", filters=[none_if_blank])
