"""
Authentication failures raised by the login and token views.

These subclass APIException directly rather than AuthenticationFailed: the
auth views run without authentication classes, and DRF downgrades
AuthenticationFailed to 403 when no WWW-Authenticate header is available.
"""

from rest_framework import status
from rest_framework.exceptions import APIException


class InvalidCredentials(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid credentials"
    default_code = "invalid_credentials"


class AccountLocked(APIException):
    status_code = status.HTTP_423_LOCKED
    default_detail = "Account temporarily locked due to multiple failed attempts"
    default_code = "account_locked"


class InvalidRefreshToken(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid refresh token"
    default_code = "invalid_refresh_token"
