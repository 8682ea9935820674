"""
Error taxonomy for the shop backend.

Every failure a workflow can report is a ShopError subclass carrying the HTTP
status it maps to. The application turns these into the response envelope.
"""


class ShopError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MissingField(ShopError):
    status_code = 400


class ImageCountError(ShopError):
    status_code = 400


class InvalidId(ShopError):
    status_code = 400


class InvalidStatus(ShopError):
    status_code = 400


class NotFound(ShopError):
    status_code = 404


class StoreFailure(ShopError):
    status_code = 500
