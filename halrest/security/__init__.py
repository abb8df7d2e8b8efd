"""
Token based security

    registry = Registry()
    security = SecurityPlugin(registry, key="secret")
    security.register_backend(ResourceBackend(resources["users"]))
    registry.freeze()

Once the plugin is installed, the requests for secure actions must carry an
"Authorization: Bearer <token>" header, tokens are issued by POST /token
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import jwt
import halrest
from ..config import get_config, get_int_config
from ..errors import AlreadyRegisteredError, ConfigurationError, MissingBackendError, UnAuthorizedError
from .backend import Backend, ResourceBackend
from .token import CreateToken


class SecurityPlugin:
    """
    :param registry: the Registry to secure
    :param key: token signing key, defaults to the TOKEN_KEY configuration
    :param sign: signing options: {"algorithm": ..., "expires_in": <seconds>}
    """

    def __init__(self, registry, key: Optional[str] = None, sign: Optional[Dict[str, Any]] = None) -> None:
        key = key or get_config("TOKEN_KEY")
        if not key:
            raise ConfigurationError("Private key for token signing/verification was not specified")
        sign = dict(sign or {})
        self.key = key
        self.algorithm = sign.get("algorithm", get_config("TOKEN_ALGORITHM"))
        self.expires_in = int(sign.get("expires_in", get_int_config("TOKEN_EXPIRES_IN")))
        self.registry = registry
        self.backend: Optional[Backend] = None
        registry.use_security(self)

    def register_backend(self, backend: Backend) -> None:
        """
        :raise AlreadyRegisteredError: a backend has already been registered
        """
        if self.backend is not None:
            raise AlreadyRegisteredError("A security backend has already been registered")
        self.registry.register_action(CreateToken(backend, self))
        self.backend = backend

    def check(self) -> None:
        if self.backend is None:
            halrest.log.critical("The security plugin has no backend")
            raise MissingBackendError("No security backend has been registered")

    def issue(self, claims: Dict[str, Any]) -> str:
        payload = dict(claims)
        now = datetime.now(timezone.utc)
        payload.update({"iat": now, "exp": now + timedelta(seconds=self.expires_in)})
        return jwt.encode(payload, self.key, algorithm=self.algorithm)

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise UnAuthorizedError("Token has expired")
        except jwt.InvalidTokenError as exc:
            raise UnAuthorizedError(f"Invalid token: {exc}")

    def authenticate(self, request) -> Any:
        """
        :return: the principal the backend resolved from the token claims
        :raise UnAuthorizedError: missing or invalid token, rejected claims
        """
        self.check()
        token = request.bearer_token
        if token is None:
            raise UnAuthorizedError("Missing bearer token")
        principal = self.backend.validate(self.decode(token), request)
        if not principal:
            raise UnAuthorizedError("The token claims were rejected")
        return principal


__all__ = ("SecurityPlugin", "Backend", "ResourceBackend", "CreateToken")
