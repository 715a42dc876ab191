class PathwaysError(Exception):
	"""Base for errors that map onto a client-visible status code."""

	status_code = 500
	default_message = "Internal server error"

	def __init__(self, message: str | None = None) -> None:
		self.message = message or self.default_message
		super().__init__(self.message)


class ValidationError(PathwaysError):
	"""Bad client input; raised before any side effect."""
	status_code = 400
	default_message = "Invalid request body"


class AuthError(PathwaysError):
	status_code = 401
	default_message = "Access denied. Invalid token"


class TokenExpired(AuthError):
	default_message = "Access denied. Token has expired"


class TokenMalformed(AuthError):
	default_message = "Access denied. Malformed token"


class TokenNotYetValid(AuthError):
	default_message = "Access denied. Token not yet valid"


class TokenTypeError(AuthError):
	default_message = "Access denied. Invalid token type"


class ConfigurationError(PathwaysError):
	"""Server-side misconfiguration (missing secret or API key). Never client-caused."""
	status_code = 500
	default_message = "Server configuration error"


class DuplicateError(PathwaysError):
	status_code = 400
	default_message = "Record already exists"


class NotFoundError(PathwaysError):
	status_code = 404
	default_message = "Not found"


class PersistenceError(PathwaysError):
	status_code = 500
	default_message = "Database error"


class UpstreamTransportError(PathwaysError):
	"""The recommendation engine could not be reached on the initial call."""
	status_code = 500
	default_message = "Recommendation engine error"
