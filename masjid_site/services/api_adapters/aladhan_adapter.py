# masjid_site/services/api_adapters/aladhan_adapter.py

import requests
from flask import current_app # To access app.logger
from .base_adapter import BasePrayerAdapter
from ...metrics import API_REQUESTS_TOTAL, API_REQUEST_DURATION_SECONDS
from ...utils.constants import PRAYER_ORDER

class AlAdhanAdapter(BasePrayerAdapter):
    """
    API Adapter for AlAdhan.com Prayer Times API.
    """

    def fetch_city_timings(self, city, country, method_id):
        """
        Fetches today's prayer times for a city from the AlAdhan.com timingsByCity endpoint.
        """
        current_app.logger.info(f"AlAdhanAdapter: Fetching timings for {city}, {country} (method {method_id})")

        endpoint = f"{self.base_url}/timingsByCity"
        params = {
            "city": city,
            "country": country,
            "method": method_id,
        }

        try:
            with API_REQUEST_DURATION_SECONDS.labels(adapter_name='AlAdhanAdapter', endpoint='timingsByCity').time():
                response = requests.get(endpoint, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()

            payload = data.get("data") if isinstance(data, dict) else None
            timings = payload.get("timings") if isinstance(payload, dict) else None
            if not isinstance(timings, dict):
                current_app.logger.error(f"AlAdhanAdapter: Response for {city} has no data.timings.")
                API_REQUESTS_TOTAL.labels(adapter_name='AlAdhanAdapter', endpoint='timingsByCity', status='malformed').inc()
                return None

            API_REQUESTS_TOTAL.labels(adapter_name='AlAdhanAdapter', endpoint='timingsByCity', status='success').inc()
            current_app.logger.info(f"AlAdhanAdapter: Successfully fetched timings for {city}.")
            return {key: timings.get(key) for key in PRAYER_ORDER}

        except requests.exceptions.Timeout:
            current_app.logger.error(f"AlAdhanAdapter: Timeout error fetching prayer times for {city}.")
            API_REQUESTS_TOTAL.labels(adapter_name='AlAdhanAdapter', endpoint='timingsByCity', status='timeout').inc()
            return None
        except requests.exceptions.RequestException as e:
            current_app.logger.error(f"AlAdhanAdapter: RequestException for {city}: {e}", exc_info=True)
            API_REQUESTS_TOTAL.labels(adapter_name='AlAdhanAdapter', endpoint='timingsByCity', status='error').inc()
            return None
        except ValueError as e:
            current_app.logger.error(f"AlAdhanAdapter: Invalid JSON for {city}: {e}", exc_info=True)
            API_REQUESTS_TOTAL.labels(adapter_name='AlAdhanAdapter', endpoint='timingsByCity', status='malformed').inc()
            return None
