class AppError(Exception):
    status_code = 500
    error = "Application error"

    def __init__(self, message, status_code=None):
        super().__init__(message)
        if status_code:
            self.status_code = status_code
        self.message = message


class ValidationError(AppError):
    status_code = 400
    error = "Validation error"


class ConfigurationError(AppError):
    error = "Configuration error"

    def __init__(self, message, missing=None):
        super().__init__(message)
        self.missing = list(missing or [])


class UpstreamError(AppError):
    status_code = 500
    error = "Upstream error"

    def __init__(self, message, payload=None, upstream_status=None):
        super().__init__(message)
        self.payload = payload
        self.upstream_status = upstream_status


class CallbackStructureError(AppError):
    status_code = 200
    error = "No STK data"


class LookupMiss(AppError):
    status_code = 404
    error = "Subscriber not found"

    def __init__(self, phone):
        super().__init__(f"No subscriber found with phone: {phone}")
        self.phone = phone
