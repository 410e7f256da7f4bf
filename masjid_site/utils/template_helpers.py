# masjid_site/utils/template_helpers.py

import re
from typing import Dict
from urllib.parse import quote

from .time_utils import format_time_12h

_ABSOLUTE_URL_RE = re.compile(r'^https?://', re.IGNORECASE)
_API_SUFFIX_RE = re.compile(r'/api/?$', re.IGNORECASE)

_FACEBOOK_PAGE_RE = re.compile(r'https?://(www\.|web\.)?facebook\.com/', re.IGNORECASE)
_FACEBOOK_PLUGIN_RE = re.compile(r'facebook\.com/plugins/', re.IGNORECASE)
_SHARE_VIDEO_RE = re.compile(r'/share/v/', re.IGNORECASE)
_VIDEO_LINK_RES = (re.compile(r'/videos/', re.IGNORECASE), re.compile(r'facebook\.com/watch/?', re.IGNORECASE))
_LIVE_LINK_RES = (re.compile(r'/live/', re.IGNORECASE), re.compile(r'live_videos', re.IGNORECASE), re.compile(r'watch/live', re.IGNORECASE))


def to_absolute_url(url, api_base):
    """
    Uploaded files come back as server-relative paths ("/uploads/x.jpg");
    those are resolved against the content API's origin.
    """
    u = str(url or '').strip()
    if not u:
        return ''
    if _ABSOLUTE_URL_RE.match(u):
        return u
    if u.startswith('/'):
        origin = _API_SUFFIX_RE.sub('', api_base or '')
        return origin + u
    return u


def google_maps_embed_src(address):
    a = str(address or '').strip()
    if not a:
        return ''
    return f"https://www.google.com/maps?q={quote(a, safe='')}&output=embed"


def is_facebook_share_link(url):
    return bool(_SHARE_VIDEO_RE.search(url or ''))


def build_facebook_embed(raw_url) -> Dict[str, str]:
    """
    Facebook refuses to be framed directly, so page/video links are rewritten
    to the official plugin endpoints. Returns {'src': ..., 'href': ...}.
    """
    raw = str(raw_url or '').strip()
    if not raw:
        return {'src': '', 'href': ''}

    href = raw.replace('web.facebook.com', 'www.facebook.com')
    if _FACEBOOK_PLUGIN_RE.search(raw) or not _FACEBOOK_PAGE_RE.search(raw):
        return {'src': href, 'href': href}

    is_video = any(r.search(raw) for r in _VIDEO_LINK_RES) or is_facebook_share_link(raw)
    is_live = any(r.search(raw) for r in _LIVE_LINK_RES)
    enc = quote(href, safe='')
    if is_video or is_live:
        return {'src': f"https://www.facebook.com/plugins/video.php?href={enc}&show_text=false&width=1280&height=720", 'href': href}
    return {
        'src': f"https://www.facebook.com/plugins/page.php?href={enc}&tabs=timeline&width=1280&height=720&small_header=true&adapt_container_width=true&hide_cover=false&show_facepile=false",
        'href': href,
    }


def choose_hero_image(site_config, api_base):
    """Primary hero image when configured, else the fallback."""
    primary = to_absolute_url(site_config.get('hero_image_url'), api_base)
    return primary or to_absolute_url(site_config.get('hero_image_fallback_url'), api_base)


def choose_live_video(site_config, use_fallback=False):
    """
    Picks the live video link and its embed. Returns None when neither
    the primary nor the fallback URL is configured.
    """
    primary = (site_config.get('live_video_url') or '').strip()
    fallback = (site_config.get('fallback_video_url') or '').strip()
    if not primary and not fallback:
        return None
    chosen = (fallback or primary) if use_fallback else (primary or fallback)
    built = build_facebook_embed(chosen)
    href = built['href'] or chosen
    return {
        'src': built['src'] or chosen,
        'href': href,
        'is_share_link': is_facebook_share_link(href),
        'has_fallback': bool(primary and fallback),
    }


def register_template_helpers(app):
    """Exposes the helpers to Jinja templates."""
    api_base = app.config.get('CONTENT_API_BASE', '')
    app.jinja_env.filters['time12h'] = format_time_12h
    app.jinja_env.filters['absolute_url'] = lambda url: to_absolute_url(url, api_base)
    app.jinja_env.filters['maps_embed'] = google_maps_embed_src
    app.jinja_env.globals['choose_hero_image'] = lambda cfg: choose_hero_image(cfg, api_base)
    app.jinja_env.globals['choose_live_video'] = choose_live_video
