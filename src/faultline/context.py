"""
Well-known keys of the context mapping attached to an error occurrence.

All values are plain data (strings or mappings) so sinks can serialize them.
"""

# String value which MAY match one of the recognized log levels.
SEVERITY = "severity"

# Mapping describing the application and its environment.
# Typical keys: os, hostname, language, version, environment, url, root_dir, component, action
APP = "app"

# Mapping describing the current user (id, username, email, ...).
USER = "user"

# Mapping describing the current request: ip, headers, url, method, params.
REQUEST = "request"

# Mapping describing the current session.
SESSION = "session"

# Mapping of environment variables.
ENVIRONMENT = "environment"

# Free-form parameters that might help resolving the problem.
PARAMETERS = "parameters"

ALL_KEYS = (SEVERITY, APP, USER, REQUEST, SESSION, ENVIRONMENT, PARAMETERS)
