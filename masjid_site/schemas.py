# masjid_site/schemas.py

from marshmallow import EXCLUDE, Schema, fields, post_load

from .utils.constants import Roles

# --- Public JSON responses ---

class PrayerScheduleSchema(Schema):
    Fajr = fields.Str(allow_none=True)
    Sunrise = fields.Str(allow_none=True)
    Dhuhr = fields.Str(allow_none=True)
    Asr = fields.Str(allow_none=True)
    Maghrib = fields.Str(allow_none=True)
    Isha = fields.Str(allow_none=True)

class PrayerTimesResponseSchema(Schema):
    status = fields.Str(required=True)
    timings = fields.Nested(PrayerScheduleSchema, allow_none=True)
    city = fields.Str()

class NextPrayerSchema(Schema):
    key = fields.Str(required=True)
    at = fields.DateTime(required=True)
    isTomorrow = fields.Bool(required=True, attribute="is_tomorrow")

class BroadcastSchema(Schema):
    name = fields.Str(required=True)
    at = fields.DateTime(required=True)
    countdown = fields.Str(required=True)

class CountdownSchema(Schema):
    now = fields.DateTime(required=True)
    nextPrayer = fields.Nested(NextPrayerSchema, allow_none=True)
    countdown = fields.Str(allow_none=True)
    broadcast = fields.Nested(BroadcastSchema, allow_none=True)

class BroadcastPreviewArgsSchema(Schema):
    date = fields.Str(load_default='')
    time = fields.Str(load_default='')

class BroadcastPreviewSchema(Schema):
    scheduled = fields.Bool(required=True)
    at = fields.DateTime(allow_none=True)
    countdown = fields.Str(allow_none=True)

# --- Content API payloads ---
# Each schema turns a (possibly merged) record into the exact body the
# content API expects for create/update. Unknown keys such as id and
# created_at are dropped; missing optional text becomes "".

class _PayloadSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    @post_load
    def blank_nones(self, data, **kwargs):
        return {k: ('' if v is None else v) for k, v in data.items()}

def _text(**kwargs):
    return fields.Str(load_default='', allow_none=True, **kwargs)

class EventPayloadSchema(_PayloadSchema):
    title = _text()
    kind = _text()
    event_date = _text()
    event_time = _text()
    when_text = _text()
    note = _text()

    @post_load
    def normalize_kind(self, data, **kwargs):
        data['kind'] = 'recurring' if data.get('kind') == 'recurring' else 'oneoff'
        return data

class ProgramPayloadSchema(_PayloadSchema):
    title = _text()
    grades = _text()
    description = _text()
    days = _text()
    time = _text()
    note = _text()

class ContactPayloadSchema(_PayloadSchema):
    role = _text()
    name = _text()
    email = _text()
    phone = _text()

class GalleryPayloadSchema(_PayloadSchema):
    title = _text()
    image_url = _text()

class FooterLinkPayloadSchema(_PayloadSchema):
    label = _text()
    url = _text()
    sort_order = fields.Raw(load_default=0, allow_none=True)

    @post_load
    def coerce_sort_order(self, data, **kwargs):
        try:
            data['sort_order'] = int(data.get('sort_order') or 0)
        except (TypeError, ValueError):
            data['sort_order'] = 0
        return data

def _normalize_role(role):
    return Roles.SUPER_ADMIN if role == Roles.SUPER_ADMIN else Roles.ADMIN

class UserCreatePayloadSchema(_PayloadSchema):
    email = fields.Str(required=True)
    password = fields.Str(required=True)
    full_name = _text()
    role = _text()

    @post_load
    def normalize_role(self, data, **kwargs):
        data['role'] = _normalize_role(data.get('role'))
        return data

class UserUpdatePayloadSchema(_PayloadSchema):
    full_name = _text()
    role = _text()
    is_active = fields.Raw(load_default=True, allow_none=True)
    password = fields.Str(load_default=None, allow_none=True)

    @post_load
    def normalize_user(self, data, **kwargs):
        data['role'] = _normalize_role(data.get('role'))
        data['is_active'] = 1 if data.get('is_active') else 0
        if not data.get('password'):
            data.pop('password', None)
        return data

CREATE_PAYLOAD_SCHEMAS = {
    'events': EventPayloadSchema,
    'programs': ProgramPayloadSchema,
    'contacts': ContactPayloadSchema,
    'gallery': GalleryPayloadSchema,
    'footer-links': FooterLinkPayloadSchema,
    'users': UserCreatePayloadSchema,
}

UPDATE_PAYLOAD_SCHEMAS = dict(CREATE_PAYLOAD_SCHEMAS, users=UserUpdatePayloadSchema)
