"""Error types raised by the services and turned into JSON responses."""


class TripAIError(Exception):
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.message}


class ValidationError(TripAIError):
    status_code = 400
    default_message = 'Invalid request'


class InsufficientFundsError(TripAIError):
    status_code = 400
    default_message = 'Insufficient wallet balance.'


class AuthenticationError(TripAIError):
    status_code = 401
    default_message = 'Invalid email or password.'


class AuthorizationError(TripAIError):
    status_code = 403
    default_message = 'You are not allowed to perform this action.'


class NotFoundError(TripAIError):
    status_code = 404
    default_message = 'Not found'


class ConflictError(TripAIError):
    status_code = 409
    default_message = 'Resource already exists'


class InternalError(TripAIError):
    status_code = 500
