"""
Service Constants

Cookie and token constants shared by the preference engine and the
identity layer.
"""

# Preference cookie
PREFERENCE_COOKIE_NAME = "preference"
PREFERENCE_COOKIE_MAX_AGE = 60 * 60 * 24 * 365  # one year, in seconds

# JWT Configuration
ALGORITHM = "HS256"
