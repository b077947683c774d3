# storefront/services/zip_code_client.py
import requests
from requests import RequestException

from storefront.domain.errors import UpstreamUnavailable
from storefront.utils.retry import http_retry
from storefront.utils.settings import ZIPCODE_URL, ZIPCODE_TOKEN, ZIPCODE_TIMEOUT
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ZipCodeClient:
    """
    HTTP gateway resolving a ZIP code to {city, state}.
    get() returns None when the provider reports the ZIP as unknown.
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
    ):
        self.base_url = (base_url or ZIPCODE_URL).rstrip("/")
        self.token = token if token is not None else ZIPCODE_TOKEN
        self.timeout = timeout or ZIPCODE_TIMEOUT

    def get(self, zip_code: str) -> dict | None:
        try:
            resp = self._fetch(zip_code)
        except RequestException as e:
            logger.error(f"ZIP lookup for {zip_code} failed: {e}")
            raise UpstreamUnavailable("ZIP code service is unavailable") from e

        if resp.status_code == 200:
            body = self._parse(resp, zip_code)
            try:
                return {"city": body["city"], "state": body["state"]}
            except (KeyError, TypeError) as e:
                logger.error(f"ZIP lookup for {zip_code} returned no location: {body}")
                raise UpstreamUnavailable("ZIP code service returned an invalid response") from e

        if resp.status_code == 404:
            body = self._parse(resp, zip_code)
            if isinstance(body, dict) and body.get("error_msg") == f'Zip code "{zip_code}" not found.':
                logger.info(f"ZIP {zip_code} not found by provider")
                return None

        logger.error(f"ZIP lookup for {zip_code} returned HTTP {resp.status_code}")
        raise UpstreamUnavailable(f"ZIP code service error, HTTP status {resp.status_code}")

    @staticmethod
    def _parse(resp: requests.Response, zip_code: str):
        try:
            return resp.json()
        except ValueError as e:
            logger.error(f"ZIP lookup for {zip_code} returned a non-JSON body (HTTP {resp.status_code})")
            raise UpstreamUnavailable("ZIP code service returned an invalid response") from e

    @http_retry()
    def _fetch(self, zip_code: str) -> requests.Response:
        url = f"{self.base_url}/rest/{self.token}/info.json/{zip_code}/degrees"
        logger.info(f"ZipCodeClient GET {self.base_url}/rest/***/info.json/{zip_code}/degrees")

        resp = requests.get(url, timeout=self.timeout)
        #5xx is worth retrying, 404 is an answer
        if resp.status_code >= 500:
            resp.raise_for_status()
        return resp
