# masjid_site/routes/api_routes.py
from flask import current_app
from flask_smorest import Blueprint
from prometheus_client import generate_latest

from ..models import Failed, Ready
from ..schemas import (
    BroadcastPreviewArgsSchema,
    BroadcastPreviewSchema,
    CountdownSchema,
    PrayerTimesResponseSchema,
)
from ..services.broadcast_service import parse_broadcast_datetime
from ..services.site_runtime import get_runtime
from ..utils.time_utils import format_countdown, millis_between

api_bp = Blueprint('API', __name__, url_prefix='/api')

@api_bp.route('/metrics')
def metrics():
    return generate_latest(), 200, {'Content-Type': 'text/plain; version=0.0.4; charset=utf-8'}


@api_bp.route('/countdown')
@api_bp.response(200, CountdownSchema)
def countdown():
    """
    One tick of the public clock: the next prayer, time left until it, and the
    broadcast countdown when one is scheduled. Pages poll this once per second.
    """
    return get_runtime().snapshot()


@api_bp.route('/prayer-times')
@api_bp.response(200, PrayerTimesResponseSchema)
def prayer_times():
    """
    Today's schedule for the configured city. When the upstream provider is
    down the page keeps rendering, so this answers 200 with status "unavailable".
    """
    runtime = get_runtime()
    today = runtime.time_source.now().date()
    state = runtime.prayer_schedule.peek(today)
    if isinstance(state, Ready):
        return {'status': 'ok', 'timings': state.value, 'city': runtime.prayer_schedule.city}
    if isinstance(state, Failed):
        current_app.logger.info(f"Prayer times requested while unavailable: {state.error}")
    return {'status': 'unavailable', 'timings': None, 'city': runtime.prayer_schedule.city}


@api_bp.route('/broadcast/preview')
@api_bp.arguments(BroadcastPreviewArgsSchema, location='query')
@api_bp.response(200, BroadcastPreviewSchema)
def broadcast_preview(args):
    """Lets the admin form check a date/time pair before saving it."""
    now = get_runtime().time_source.now()
    at = parse_broadcast_datetime(args.get('date'), args.get('time'), now.tzinfo)
    if at is None:
        return {'scheduled': False, 'at': None, 'countdown': None}
    return {'scheduled': True, 'at': at, 'countdown': format_countdown(millis_between(now, at))}
