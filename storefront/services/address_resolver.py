# storefront/services/address_resolver.py
import re

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.database import unit_of_work
from storefront.data.models.address import AddressModel
from storefront.domain.errors import ConflictError, ErrorCode, ValidationFailed
from storefront.repos.address_repo import AddressRepo
from storefront.repos.customer_repo import CustomerRepo
from storefront.services.zip_code_cache import ZipCodeCache
from storefront.services.zip_code_client import ZipCodeClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# 50 states + DC
US_STATES = frozenset({
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA", "HI", "ID", "IL", "IN", "IA",
    "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC", "SD", "TN", "TX", "UT", "VT",
    "VA", "WA", "WV", "WI", "WY", "DC",
})

_ZIP_RE = re.compile(r"[0-9]{5}")
_DIGITS_RE = re.compile(r"[0-9]+")


class AddressResolver:
    """
    Validates a shipping address against the ZIP code provider and stores it.

    Steps (first failure wins):
    1. state is a USPS code
    2. ZIP has five digits
    3. street number is a non-negative integer
    4. customer exists
    5. ZIP -> {city, state} from the cache, or the provider on a miss
    6. resolved city/state equal the given ones
    7. address line is composed
    8. first address of the customer becomes the default
    9. address is persisted
    """

    def __init__(
        self,
        db: Session,
        zip_code_client: ZipCodeClient,
        zip_code_cache: ZipCodeCache,
    ):
        self.db = db
        self.repo = AddressRepo(db)
        self.customers = CustomerRepo(db)
        self.zip_code_client = zip_code_client
        self.zip_code_cache = zip_code_cache

    def resolve(
        self,
        customer_id,
        city: str,
        state: str,
        zip_code: str,
        street_name: str,
        street_number: str,
    ) -> AddressModel:
        self._validate(state, zip_code, street_number)

        if not self.customers.get_customer(customer_id):
            raise ConflictError(ErrorCode.CUSTOMER_NOT_FOUND, "customer not found")

        location = self.lookup_zip(zip_code)
        if location is None:
            raise ConflictError(
                ErrorCode.ZIP_NOT_RESOLVABLE, "ZIP code does not match any location"
            )

        if location["city"] != city or location["state"] != state:
            logger.warning(
                f"ZIP {zip_code} resolves to {location['city']}, {location['state']}, "
                f"got {city}, {state}"
            )
            raise ConflictError(
                ErrorCode.ADDRESS_MISMATCH,
                "ZIP code location does not match with provided city and state",
            )

        address = AddressModel(
            customer_id=customer_id,
            is_default=False,
            street=street_name,
            number=street_number,
            city=city,
            state=state,
            zip_code=zip_code,
            address_line=f"{street_number} {street_name}, {city}, {state} {zip_code}",
        )

        with unit_of_work(self.db):
            self._persist(address)

        logger.info(
            f"Address {address.id} added for customer {customer_id} (default={address.is_default})"
        )
        return address

    def lookup_zip(self, zip_code: str) -> dict | None:
        cached = self.zip_code_cache.get(zip_code)
        if cached is not None:
            logger.info(f"ZIP {zip_code} served from cache")
            return cached

        location = self.zip_code_client.get(zip_code)
        if location is not None:
            self.zip_code_cache.set(zip_code, location)
        return location

    def promote_to_default(self, address: AddressModel) -> AddressModel:
        """Flags a freshly created address as the customer's default; creation time only."""
        address.is_default = True
        return address

    def list_addresses(self, customer_id) -> list[AddressModel]:
        return self.repo.list_by_customer(customer_id)

    def _validate(self, state: str, zip_code: str, street_number: str) -> None:
        if state.upper() not in US_STATES:
            raise ValidationFailed(
                ErrorCode.INVALID_STATE,
                "state must be a valid 2-letter U.S. abbreviation (e.g. NY, CA)",
            )

        if not _ZIP_RE.fullmatch(zip_code):
            raise ValidationFailed(
                ErrorCode.INVALID_ZIP, "ZIP code is invalid. It must be 5 digits (e.g. 12345)"
            )

        if not _DIGITS_RE.fullmatch(street_number):
            raise ValidationFailed(
                ErrorCode.INVALID_STREET_NUMBER, "street number must contain only digits (0-9)"
            )

    def _persist(self, address: AddressModel) -> None:
        if not self.repo.has_default(address.customer_id):
            self.promote_to_default(address)

        try:
            with self.db.begin_nested():
                self.repo.create_address(address)
        except IntegrityError:
            #only a default created concurrently is recoverable
            if not address.is_default or not self.repo.has_default(address.customer_id):
                raise
            logger.info(f"Customer {address.customer_id} got a default address concurrently")
            address.is_default = False
            self.repo.create_address(address)
