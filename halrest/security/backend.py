"""
Security backends: validate the claims of a token and resolve the principal of a login
"""
import abc
import hmac
from typing import Any, Dict, Optional, Sequence
from werkzeug.security import check_password_hash
import halrest
from ..query import Condition
from ..source import ReadQuery

LOGIN_SCHEMA = {
    "title": "token",
    "type": "object",
    "properties": {"username": {"type": "string"}, "password": {"type": "string"}},
    "required": ["username", "password"],
}


class Backend(abc.ABC):
    """
    A backend resolves principals, a falsy principal rejects the request
    """

    # schema of the login data accepted by CreateToken
    schema: Dict[str, Any] = LOGIN_SCHEMA

    @abc.abstractmethod
    def validate(self, claims: Dict[str, Any], request) -> Any:
        """
        :param claims: the decoded (and verified) token claims
        :param request: the ActionRequest
        :return: the principal, or False to reject the request
        """

    @abc.abstractmethod
    def login(self, credentials: Dict[str, Any], request) -> Any:
        """
        :param credentials: the validated login data
        :param request: the ActionRequest
        :return: the principal, or False when the credentials are invalid
        """

    def claims(self, principal) -> Dict[str, Any]:
        """
        :return: the claims that are signed into the token of principal
        """
        return dict(principal)


class ResourceBackend(Backend):
    """
    Backend that looks up principals in a resource (e.g. a "users" table)

    :param resource: the Resource holding the accounts
    :param username_field: field matched against the submitted username
    :param password_field: field holding the password (hash)
    :param claims: the fields signed into the token
    :param hashed: whether password_field holds werkzeug password hashes
    """

    def __init__(
        self,
        resource,
        username_field: str = "username",
        password_field: str = "password",
        claims: Sequence[str] = ("id", "username"),
        hashed: bool = True,
    ) -> None:
        self.resource = resource
        self.username_field = username_field
        self.password_field = password_field
        self.claim_fields = tuple(claims)
        self.hashed = hashed

    def _lookup(self, field: str, value: Any) -> Optional[Dict[str, Any]]:
        return self.resource.source.read_one(ReadQuery(self.resource.name, [Condition(field, value)]))

    def _check_password(self, stored: Optional[str], password: str) -> bool:
        if stored is None:
            return False
        if not self.hashed:
            return hmac.compare_digest(str(stored), password)
        try:
            return check_password_hash(stored, password)
        except ValueError:
            # not a werkzeug hash
            return False

    def login(self, credentials, request):
        row = self._lookup(self.username_field, credentials["username"])
        if row is None or not self._check_password(row.get(self.password_field), credentials["password"]):
            halrest.log.info(f"Invalid login for {credentials['username']!r}")
            return False
        if row.get("enabled") is False:
            halrest.log.info(f"Login for disabled account {credentials['username']!r}")
            return False
        return {field: row.get(field) for field in self.claim_fields}

    def validate(self, claims, request):
        """
        The token is only valid as long as the account still exists and is enabled
        """
        username = claims.get(self.username_field)
        if username is None:
            return False
        row = self._lookup(self.username_field, username)
        if row is None or row.get("enabled") is False:
            return False
        return {field: row.get(field) for field in self.claim_fields}
