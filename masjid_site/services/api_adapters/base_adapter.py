# This module defines the base interface for all prayer time API adapters.
from abc import ABC, abstractmethod

class BasePrayerAdapter(ABC):
    """
    Abstract base class for prayer time API adapters. It ensures that all adapters
    adhere to a common interface, returning data in a standardized format.
    """

    def __init__(self, base_url, timeout=10):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    @abstractmethod
    def fetch_city_timings(self, city, country, method_id):
        """
        Fetches today's timings for a city and returns the flat mapping
        {Fajr, Sunrise, Dhuhr, Asr, Maghrib, Isha} -> "HH:MM", or None on failure.
        """
        pass
