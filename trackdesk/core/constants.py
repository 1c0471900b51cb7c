"""Core constants: store layout, envelope marker, and key rules.

Single source of truth for partition layout and store key constraints.
Used by the path resolver, key sanitizer, envelope codec, and store adapters.
"""

# Partition layout: {DATA_ROOT}/{owner}/{collection}
DATA_ROOT = "data"
PATH_SEP = "/"

# Only collection an employee may read or write (in their own partition)
EMPLOYEE_COLLECTION = "notifications"

# Characters the realtime store forbids in keys
FORBIDDEN_KEY_CHARS = ".#$[]/"
KEY_SUBSTITUTE = "_"

# base64(b"Salted__"): OpenSSL / CryptoJS passphrase ciphertext header
ENVELOPE_PREFIX = "U2FsdGVkX1"
ENVELOPE_MAGIC = b"Salted__"

# Field name the mirrored push key is exposed under
ID_FIELD = "id"

# Logical collection names (partitions are created on first write)
COLLECTION_TICKETS = "tickets"
COLLECTION_RENEWALS = "renewals"
COLLECTION_WORK = "work"
COLLECTION_BILLS = "bills"
COLLECTION_CUSTOM_FORMS = "customForms"
COLLECTION_FORM_ENTRIES = "formEntries"
COLLECTION_NOTIFICATIONS = EMPLOYEE_COLLECTION

# Single-value objects
OBJECT_LAST_RENEWAL_CHECK = "lastRenewalCheck"
