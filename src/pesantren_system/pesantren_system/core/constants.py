"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_SEARCH_LIMIT = 5
DEFAULT_TOP_DONORS = 5
DEFAULT_RECENT_LIMIT = 5
DEFAULT_AUDIT_LIMIT = 200
DEFAULT_TAHUN_AJARAN = "2024/2025"
LOW_BALANCE_THRESHOLD = 100_000

RISK_HIGH_MIN = 50
RISK_MEDIUM_MIN = 20

ACCESS_DENIED_MESSAGE = "Anda tidak memiliki akses ke halaman ini"
