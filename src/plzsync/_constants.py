"""Internal constants shared across the library."""

BASE_URL = "https://openplzapi.org"
COUNTRY = "de"
USER_AGENT = "plzsync"
LOCALITIES_ENDPOINT = "/Localities"

DEFAULT_DEBOUNCE_DELAY: float = 1.0

# ------------------------------------------------------------------
# Field error messages
# ------------------------------------------------------------------

LOCALITY_NOT_FOUND = "No postal codes found for this locality"
LOCALITY_LOOKUP_FAILED = "Error fetching postal codes. Please try again."
POSTAL_CODE_NOT_FOUND = "Invalid postal code"
POSTAL_CODE_LOOKUP_FAILED = "Error validating postal code. Please try again."
