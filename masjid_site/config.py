import os
from datetime import timedelta
from dotenv import load_dotenv

# Load .env file
dotenv_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)
else:
    print("Warning: .env file not found. Using defaults or environment variables.")

class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'a_default_fallback_secret_key_for_development_only'
    WTF_CSRF_ENABLED = True # Enabled by default, can be disabled in testing
    LOG_LEVEL = "INFO"

    # Sentry Configuration
    SENTRY_DSN = os.environ.get('SENTRY_DSN')

    # Redis is only used for the advisory site-config cache.
    REDIS_URL = os.environ.get('REDIS_URL') or 'redis://localhost:6379/0'
    SITE_CONFIG_CACHE_KEY = os.environ.get('SITE_CONFIG_CACHE_KEY', 'site_config_cache')

    # Venue
    VENUE_TIMEZONE = os.environ.get('VENUE_TIMEZONE', 'Africa/Johannesburg')

    # Prayer Time API Configuration
    PRAYER_API_ADAPTER = os.environ.get('PRAYER_API_ADAPTER') or "AlAdhanAdapter"
    PRAYER_API_BASE_URL = os.environ.get('PRAYER_API_BASE_URL') or "https://api.aladhan.com/v1"
    PRAYER_API_TIMEOUT = int(os.environ.get('PRAYER_API_TIMEOUT', 10))
    PRAYER_CITY = os.environ.get('PRAYER_CITY', 'Cape Town')
    PRAYER_COUNTRY = os.environ.get('PRAYER_COUNTRY', 'South Africa')
    PRAYER_METHOD_ID = int(os.environ.get('PRAYER_METHOD_ID', 2))

    # Content API Configuration (remote source of truth for all site content)
    CONTENT_API_BASE = os.environ.get('CONTENT_API_BASE') or 'https://masjidaltaubah.co.za/api'
    CONTENT_API_TIMEOUT = int(os.environ.get('CONTENT_API_TIMEOUT', 20))
    # Seed from the cache, then bulk-fetch all content when the app starts
    CONTENT_LOAD_ON_STARTUP = os.environ.get('CONTENT_LOAD_ON_STARTUP', '1') == '1'

    # Admin notices disappear after this many seconds
    NOTICE_TTL_SECONDS = 2.5

    ADMIN_LOGIN_RATE_LIMIT = os.environ.get('ADMIN_LOGIN_RATE_LIMIT', '10 per minute')

    # Admin browser sessions; an admin controller idle this long is closed
    PERMANENT_SESSION_LIFETIME = timedelta(hours=int(os.environ.get('ADMIN_SESSION_HOURS', 8)))
    ADMIN_SESSION_IDLE_TIMEOUT = PERMANENT_SESSION_LIFETIME

class DevelopmentConfig(Config):
    FLASK_ENV = 'development'
    DEBUG = True
    LOG_LEVEL = "DEBUG"

class ProductionConfig(Config):
    FLASK_ENV = 'production'
    DEBUG = False

    # Ensure critical secrets are set in production
    if os.environ.get('FLASK_CONFIG') == 'production':
        if not Config.SECRET_KEY or Config.SECRET_KEY == 'a_default_fallback_secret_key_for_development_only':
            raise ValueError("CRITICAL: SECRET_KEY not found in environment!")

        if not Config.SENTRY_DSN:
            print("Warning: SENTRY_DSN not found. Error tracking will be disabled.")

class TestingConfig(Config):
    TESTING = True
    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False # Disable rate limiting for tests
    SECRET_KEY = 'test-secret-key'
    CONTENT_API_BASE = 'https://content.test/api'
    PRAYER_API_BASE_URL = 'https://prayer.test/v1'
    CONTENT_LOAD_ON_STARTUP = False

config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
