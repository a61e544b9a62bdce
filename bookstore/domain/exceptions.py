class DomainException(Exception):
    pass


class InvalidArgumentError(DomainException):
    pass


class EmailAlreadyRegisteredError(InvalidArgumentError):
    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email {email} is already registered")


class InvalidStatusTransitionError(InvalidArgumentError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change order status from {current} to {requested}")


class AuthenticationError(DomainException):
    pass


class PermissionDeniedError(DomainException):
    pass


class NotFoundError(DomainException):
    pass


class BookNotFoundError(NotFoundError):
    def __init__(self, book_id: str):
        self.book_id = book_id
        super().__init__(f"Book with ID {book_id} not found")


class UserNotFoundError(NotFoundError):
    pass


class CartNotFoundError(NotFoundError):
    pass


class CartItemNotFoundError(NotFoundError):
    pass


class OrderNotFoundError(NotFoundError):
    pass


class StorageError(DomainException):
    """Store backend failure: unreachable database, unreadable file, broken document."""
