"""Public forms: contact inquiries and community photo submissions."""

from __future__ import annotations

from flask_wtf.file import FileField, FileRequired
from wtforms import StringField, TextAreaField
from wtforms.validators import AnyOf, Length, Optional, Regexp

from lakehenry.forms import PlainForm, none_if_blank, strip_filter
from lakehenry.models import PHOTO_CATEGORIES

EMAIL_PATTERN = r'^[^\s@]+@[^\s@]+\.[^\s@]+$'


class ContactForm(PlainForm):
    """Inquiry form. ``company`` is a honeypot that humans never see."""

    company = StringField(filters=[strip_filter])
    name = StringField(
        "Name",
        filters=[strip_filter],
        validators=[Length(min=2, max=200, message='input')],
    )
    email = StringField(
        "Email",
        filters=[strip_filter],
        validators=[Regexp(EMAIL_PATTERN, message='input'), Length(max=320, message='input')],
    )
    message = TextAreaField(
        "Message",
        filters=[strip_filter],
        validators=[Length(min=10, max=5000, message='input')],
    )


class PhotoSubmitForm(PlainForm):
    company = StringField(filters=[strip_filter])
    category = StringField(
        "Category",
        filters=[strip_filter],
        validators=[AnyOf(PHOTO_CATEGORIES, message='category')],
    )
    photo = FileField("Photo", validators=[FileRequired(message='file')])
    alt = StringField(
        "Describe the photo",
        filters=[strip_filter],
        validators=[Length(min=5, max=500, message='alt')],
    )
    title = StringField("Title", filters=[none_if_blank], validators=[Optional(), Length(max=200, message='input')])
    caption = TextAreaField("Caption", filters=[none_if_blank])
    submittedBy = StringField("Your name", filters=[none_if_blank], validators=[Optional(), Length(max=200, message='input')])
