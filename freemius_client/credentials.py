"""
API credentials and the scopes a key pair can be bound to.
"""

import enum
from dataclasses import dataclass, field
from typing import Union

from .exceptions import ConfigurationError


class Scope(enum.Enum):
    """Authorization context of an API key."""

    DEVELOPER = "developer"
    PLUGIN = "plugin"
    INSTALL = "install"
    USER = "user"
    APP = "app"
    STORE = "store"

    @classmethod
    def parse(cls, value: Union["Scope", str]) -> "Scope":
        """Resolve a scope from an enum member or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ConfigurationError(f"Invalid scope: {value!r}") from None

    @property
    def collection(self) -> str:
        """Plural resource name used in API paths, e.g. ``developers``."""
        return f"{self.value}s"


@dataclass(frozen=True)
class Credentials:
    """
    Long-lived key pair bound to one scope entity.

    When the secret key equals the public key the request signer switches to
    the public-hash scheme.
    """

    scope: Scope
    scope_id: int
    public_key: str
    secret_key: str = field(repr=False)

    def __post_init__(self):
        object.__setattr__(self, 'scope', Scope.parse(self.scope))

        if isinstance(self.scope_id, bool) or not isinstance(self.scope_id, int):
            raise ConfigurationError("scope_id must be an integer")
        if self.scope_id <= 0:
            raise ConfigurationError("scope_id must be positive")
        if not self.public_key:
            raise ConfigurationError("public_key cannot be empty")
        if not self.secret_key:
            raise ConfigurationError("secret_key cannot be empty")

    @property
    def uses_public_hash(self) -> bool:
        return self.secret_key == self.public_key
