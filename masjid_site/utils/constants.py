# masjid_site/utils/constants.py

class Roles:
    """
    Role names issued by the external auth service.
    Only a super admin may manage the users collection.
    """
    SUPER_ADMIN = 'super_admin'
    ADMIN = 'admin'


# Fixed order in which the daily schedule is scanned for the next prayer.
PRAYER_ORDER = ('Fajr', 'Sunrise', 'Dhuhr', 'Asr', 'Maghrib', 'Isha')

# Remote collections, keyed by their resource path on the content API.
COLLECTION_KINDS = ('events', 'programs', 'contacts', 'gallery', 'footer-links', 'users')
PUBLIC_COLLECTION_KINDS = ('events', 'programs', 'contacts', 'gallery', 'footer-links')

SITE_RESOURCE = 'content/site'

# The only site-config fields an admin patch may carry.
SITE_CONFIG_FIELDS = (
    'brand_name',
    'brand_subtitle',
    'brand_est',
    'brand_address',
    'brand_email',
    'brand_phone',
    'logo_url',
    'hero_headline',
    'hero_body',
    'hero_image_url',
    'hero_image_fallback_url',
    'live_video_url',
    'fallback_video_url',
    'broadcast_name',
    'broadcast_date',
    'broadcast_time',
    'about_text',
    'donations_title',
    'donations_body',
    'donations_details',
)

# Shown until the cached or fetched document arrives.
DEFAULT_SITE = {
    'id': 1,
    'brand_name': 'Masjid Al Taubah',
    'brand_subtitle': 'Islamic Society of Chatsworth',
    'brand_est': 'Est. 1995',
    'brand_address': '45 Hopefield Rd, Greater Chatsworth, Malmesbury, 7354',
    'brand_email': 'imam.chatsworth@gmail.com',
    'brand_phone': '',
    'logo_url': '',
    'hero_headline': 'A welcoming masjid for worship, learning, and community.',
    'hero_body': "Masjid Al Taubah serves the community with programs, daily learning, and Jumu'ah on Fridays.",
    'hero_image_url': '',
    'hero_image_fallback_url': 'https://images.unsplash.com/photo-1543269865-cbf427effbad?auto=format&fit=crop&w=1600&q=80',
    'live_video_url': '',
    'fallback_video_url': '',
    'broadcast_name': '',
    'broadcast_date': '',
    'broadcast_time': '',
    'about_text': 'Established in 1995, we aim to serve with sincerity, welcoming worshippers and families in a respectful and peaceful environment.',
    'donations_title': 'Donations',
    'donations_body': 'Your contribution helps support the masjid operations, education programs, and community outreach.',
    'donations_details': 'Bank: Example Bank\nAccount Name: Masjid Al Taubah\nAccount No: 123456789\nBranch Code: 0000\nReference: Donation',
}
