from passlib.context import CryptContext

from bookstore.application.interfaces import PasswordHasher


class PasslibPasswordHasher(PasswordHasher):
    """New hashes use the first scheme; bcrypt hashes from json-server-auth still verify."""

    def __init__(self, schemes=("pbkdf2_sha256", "bcrypt")):
        self._context = CryptContext(schemes=list(schemes), deprecated="auto")

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return self._context.verify(password, hashed)
        except ValueError:
            # stored value is not a hash passlib recognises
            return False
