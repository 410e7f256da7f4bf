# masjid_site/routes/main_routes.py

from flask import Blueprint, render_template, current_app, request

from ..models import ready_value
from ..services.site_runtime import get_runtime
from ..utils.constants import PRAYER_ORDER

main_bp = Blueprint('main', __name__)


def _page_context():
    """
    Values every public page needs: site config, footer links and the current tick.
    A page load is the only place a failed prayer schedule is fetched again.
    """
    runtime = get_runtime()
    now = runtime.time_source.now()
    runtime.prayer_schedule.current(now.date())
    return {
        'site': runtime.store.site_config,
        'site_ready': runtime.store.site_ready,
        'footer_links': runtime.store.collection('footer-links'),
        'tick': runtime.snapshot(now),
    }


@main_bp.route('/')
def index():
    runtime = get_runtime()
    use_fallback = request.args.get('video') == 'fallback'
    return render_template('index.html',
                           title="Home",
                           programs=runtime.store.collection('programs')[:3],
                           events=runtime.store.collection('events')[:3],
                           use_fallback_video=use_fallback,
                           **_page_context())


@main_bp.route('/prayer-times')
def prayer_times():
    runtime = get_runtime()
    context = _page_context()
    state = runtime.prayer_schedule.state
    timings = ready_value(state)
    if timings is None:
        current_app.logger.info("Rendering prayer page without a schedule.")
    return render_template('prayer_times.html',
                           title="Prayer Times",
                           prayer_order=PRAYER_ORDER,
                           timings=timings,
                           schedule_state=state,
                           city=runtime.prayer_schedule.city,
                           **context)


@main_bp.route('/about')
def about():
    return render_template('about.html', title="About", **_page_context())


@main_bp.route('/programs')
def programs():
    return render_template('programs.html',
                           title="Programs",
                           programs=get_runtime().store.collection('programs'),
                           **_page_context())


@main_bp.route('/events')
def events():
    rows = get_runtime().store.collection('events')
    return render_template('events.html',
                           title="Events",
                           recurring=[e for e in rows if e.get('kind') == 'recurring'],
                           oneoff=[e for e in rows if e.get('kind') != 'recurring'],
                           **_page_context())


@main_bp.route('/gallery')
def gallery():
    return render_template('gallery.html',
                           title="Gallery",
                           photos=get_runtime().store.collection('gallery'),
                           **_page_context())


@main_bp.route('/donations')
def donations():
    return render_template('donations.html', title="Donations", **_page_context())


@main_bp.route('/contact')
def contact():
    return render_template('contact.html',
                           title="Contact",
                           contacts=get_runtime().store.collection('contacts'),
                           **_page_context())
