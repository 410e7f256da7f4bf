# masjid_site/forms.py

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField, SubmitField, BooleanField, SelectField, TextAreaField, IntegerField
from wtforms.validators import DataRequired, Email, Length, Optional, Regexp

from .utils.constants import Roles

class LoginForm(FlaskForm):
    email = StringField('Email', validators=[DataRequired(), Email()])
    password = PasswordField('Password', validators=[DataRequired()])
    submit = SubmitField('Log In')

class SiteConfigForm(FlaskForm):
    """Every editable site field. Anything not listed here never reaches the content API."""
    brand_name = StringField('Brand name', validators=[Optional(), Length(max=200)])
    brand_subtitle = StringField('Subtitle', validators=[Optional(), Length(max=200)])
    brand_est = StringField('Established', validators=[Optional(), Length(max=50)])
    brand_address = StringField('Address', validators=[Optional(), Length(max=300)])
    brand_email = StringField('Email', validators=[Optional(), Email()])
    brand_phone = StringField('Phone', validators=[Optional(), Length(max=50)])
    logo_url = StringField('Logo URL', validators=[Optional()])
    hero_headline = StringField('Hero headline', validators=[Optional()])
    hero_body = TextAreaField('Hero body', validators=[Optional()])
    hero_image_url = StringField('Hero image URL', validators=[Optional()])
    hero_image_fallback_url = StringField('Hero fallback image URL', validators=[Optional()])
    live_video_url = StringField('Live video URL', validators=[Optional()])
    fallback_video_url = StringField('Fallback video URL', validators=[Optional()])
    broadcast_name = StringField('Broadcast name', validators=[Optional()])
    # Malformed values are stored as entered; the countdown simply stays hidden for them.
    broadcast_date = StringField('Broadcast date (YYYY-MM-DD)', validators=[Optional()])
    broadcast_time = StringField('Broadcast time (HH:MM)', validators=[Optional()])
    about_text = TextAreaField('About', validators=[Optional()])
    donations_title = StringField('Donations title', validators=[Optional()])
    donations_body = TextAreaField('Donations text', validators=[Optional()])
    donations_details = TextAreaField('Banking details', validators=[Optional()])
    submit = SubmitField('Save')

class EventForm(FlaskForm):
    title = StringField('Title', validators=[DataRequired(), Length(max=200)])
    kind = SelectField('Type', choices=[('oneoff', 'One-off'), ('recurring', 'Recurring')], default='oneoff')
    event_date = StringField('Date', validators=[Optional(), Regexp(r'^[0-9]{4}-[0-9]{2}-[0-9]{2}$', message="Use YYYY-MM-DD.")])
    event_time = StringField('Time', validators=[Optional(), Regexp(r'^[0-9]{2}:[0-9]{2}$', message="Use HH:MM.")])
    when_text = StringField('When (recurring)', validators=[Optional()])
    note = TextAreaField('Note', validators=[Optional()])
    submit = SubmitField('Save')

class ProgramForm(FlaskForm):
    title = StringField('Title', validators=[DataRequired(), Length(max=200)])
    grades = StringField('Grades', validators=[Optional()])
    description = TextAreaField('Description', validators=[Optional()])
    days = StringField('Days', validators=[Optional()])
    time = StringField('Time', validators=[Optional()])
    note = TextAreaField('Note', validators=[Optional()])
    submit = SubmitField('Save')

class ContactForm(FlaskForm):
    role = StringField('Role', validators=[DataRequired()])
    name = StringField('Name', validators=[DataRequired()])
    email = StringField('Email', validators=[Optional(), Email()])
    phone = StringField('Phone', validators=[Optional()])
    submit = SubmitField('Save')

class GalleryForm(FlaskForm):
    title = StringField('Caption', validators=[Optional()])
    image_url = StringField('Image URL', validators=[DataRequired()])
    submit = SubmitField('Save')

class FooterLinkForm(FlaskForm):
    label = StringField('Label', validators=[DataRequired()])
    url = StringField('URL', validators=[DataRequired()])
    sort_order = IntegerField('Sort order', default=0, validators=[Optional()])
    submit = SubmitField('Save')

_ROLE_CHOICES = [(Roles.ADMIN, 'Admin'), (Roles.SUPER_ADMIN, 'Super admin')]

class UserCreateForm(FlaskForm):
    email = StringField('Email', validators=[DataRequired(), Email()])
    full_name = StringField('Full name', validators=[Optional()])
    role = SelectField('Role', choices=_ROLE_CHOICES, default=Roles.ADMIN)
    password = PasswordField('Password', validators=[DataRequired(), Length(min=8, message="Password must be at least 8 characters long.")])
    submit = SubmitField('Create')

class UserUpdateForm(FlaskForm):
    full_name = StringField('Full name', validators=[Optional()])
    role = SelectField('Role', choices=_ROLE_CHOICES, default=Roles.ADMIN)
    is_active = BooleanField('Active', default=True)
    password = PasswordField('New password (leave blank to keep)', validators=[Optional(), Length(min=8)])
    submit = SubmitField('Update')

CREATE_FORMS = {
    'events': EventForm,
    'programs': ProgramForm,
    'contacts': ContactForm,
    'gallery': GalleryForm,
    'footer-links': FooterLinkForm,
    'users': UserCreateForm,
}

UPDATE_FORMS = dict(CREATE_FORMS, users=UserUpdateForm)

def form_fields(form):
    """Submitted values without the submit button and CSRF token."""
    return {k: v for k, v in form.data.items() if k not in ('submit', 'csrf_token')}
