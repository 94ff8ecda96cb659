"""API throttling classes."""

from rest_framework.throttling import AnonRateThrottle

class RegistrationRateThrottle(AnonRateThrottle):
    """Throttle limiting public sign-ups per client address (rate from settings)."""
    scope = "registration"
