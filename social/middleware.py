"""
================================================================================
SOCIALHUB - CUSTOM MIDDLEWARE
================================================================================

@file        middleware.py
@description Timezone activation and structured error responses

MODULE PURPOSE
================================================================================
1. TimezoneMiddleware
   - Activates the authenticated user's timezone so serialised timestamps
     (notification lists) come out in local time
   - Falls back to UTC for anonymous users or invalid timezones

2. SocialErrorMiddleware
   - Renders SocialError subclasses raised by the service layer as JSON
     bodies with the error's HTTP status code
   - Anything that is not a SocialError is left to Django

RESPONSE FORMAT
================================================================================
    HTTP 409
    {"error": "Friend request already sent",
     "operation": "send_friend_request",
     "id": 42}

================================================================================
"""

import logging

import pytz
from django.http import JsonResponse
from django.utils import timezone

from .exceptions import SocialError

logger = logging.getLogger(__name__)


# ============================================================================
# TIMEZONE MIDDLEWARE
# ============================================================================

class TimezoneMiddleware:
    """
    Activate user-specific timezone for datetime display.

    Error Handling:
        - pytz.UnknownTimeZoneError: Invalid timezone string -> UTC
        - AttributeError: User has no timezone attribute -> UTC
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        tz = pytz.UTC
        if request.user.is_authenticated:
            try:
                tz = pytz.timezone(request.user.timezone)
            except (pytz.UnknownTimeZoneError, AttributeError):
                logger.warning("Invalid timezone for user %s, using UTC", request.user.pk)
        timezone.activate(tz)
        try:
            return self.get_response(request)
        finally:
            timezone.deactivate()


# ============================================================================
# ERROR RESPONSE MIDDLEWARE
# ============================================================================

class SocialErrorMiddleware:
    """
    Turn service-layer failures into JSON error responses.

    Client errors (4xx) are logged at INFO, storage failures at ERROR.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        return self.get_response(request)

    def process_exception(self, request, exception):
        if not isinstance(exception, SocialError):
            return None
        if exception.status_code >= 500:
            logger.error("%s failed on %s", exception, request.path)
        else:
            logger.info("%s rejected on %s", exception, request.path)
        return JsonResponse(exception.as_dict(), status=exception.status_code)
