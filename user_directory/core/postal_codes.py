"""Postal-code lookup by city name against the OpenDataSoft geonames dataset."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from user_directory.core import config
from user_directory.core.cancellation import CancellationToken
from user_directory.core.exceptions import DirectoryError, RequestCancelledError
from user_directory.core.http_client import HttpClient

logger = logging.getLogger(__name__)

DATASET = "geonames-postal-code"
ROWS = 20
MAX_RESULTS = 10


@dataclass
class PostalCodeResult:
    """A candidate postal code for a searched city."""

    postal_code: str
    place_name: str
    country_code: str
    admin_name1: str
    full_address: str
    coordinates: Optional[List[float]] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'PostalCodeResult':
        fields = record.get('fields') or {}
        place_name = fields.get('place_name', '')
        admin_name1 = fields.get('admin_name1', '')
        country_code = fields.get('country_code', '')
        return cls(
            postal_code=str(fields.get('postal_code', '')),
            place_name=place_name,
            country_code=country_code,
            admin_name1=admin_name1,
            full_address=f"{place_name}, {admin_name1}, {country_code}",
            coordinates=(record.get('geometry') or {}).get('coordinates')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'postalCode': self.postal_code,
            'placeName': self.place_name,
            'countryCode': self.country_code,
            'adminName1': self.admin_name1,
            'fullAddress': self.full_address,
            'coordinates': self.coordinates
        }


class PostalCodeSearch:
    """Searches postal codes for a city, keeping loading/error state for the UI."""

    def __init__(self, client: HttpClient, endpoint: str = config.POSTAL_CODE_ENDPOINT):
        self.client = client
        self.endpoint = endpoint
        self.loading = False
        self.error: Optional[str] = None

    async def search(self, city_name: str, token: Optional[CancellationToken] = None) -> List[PostalCodeResult]:
        """
        Look up postal codes for a city.

        Args:
            city_name: City to search; fewer than 2 characters returns nothing
            token: Optional cancellation token

        Returns:
            Up to 10 results, unique by (postal code, place name)

        Raises:
            RequestCancelledError: If the token fires
        """
        if not city_name or len(city_name.strip()) < 2:
            return []

        self.loading = True
        self.error = None
        try:
            data = await self.client.fetch_resource(
                self.endpoint, "search postal codes", token,
                params={"dataset": DATASET, "q": city_name.strip(), "rows": ROWS},
            )
        except RequestCancelledError:
            raise
        except DirectoryError as e:
            logger.error(f"Postal code search for {city_name!r} failed: {str(e)}")
            self.error = str(e) or "Failed to search postal codes"
            return []
        finally:
            self.loading = False

        results = [PostalCodeResult.from_record(record) for record in (data or {}).get('records') or []]

        unique = []
        seen = set()
        for result in results:
            key = (result.postal_code, result.place_name)
            if key in seen:
                continue
            seen.add(key)
            unique.append(result)
        return unique[:MAX_RESULTS]
