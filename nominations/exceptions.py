from rest_framework import status


class NominationError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class InvalidArgument(NominationError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(NominationError):
    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(NominationError):
    status_code = status.HTTP_403_FORBIDDEN


class Unauthenticated(NominationError):
    status_code = status.HTTP_401_UNAUTHORIZED
