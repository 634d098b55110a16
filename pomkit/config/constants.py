"""
Configuration-related constants, override slot names and resource limits.
"""

# Environment used when neither an explicit name nor TEST_ENV is set
DEFAULT_ENVIRONMENT = "QA"

# Maximum environment table file size (10MB)
MAX_CONFIG_SIZE_BYTES = 10 * 1024 * 1024

# Table file location
DEFAULT_CONFIG_FILENAME = "environments.yaml"
CONFIG_FILE_ENV_VAR = "POM_CONFIG_FILE"

# External override slots
ENV_NAME_SLOT = "TEST_ENV"
BASE_URL_SLOT = "BASE_URL"
ENV_PREFIX_SLOT = "ENV_PREFIX"
SUBDOMAIN_SLOT = "SUBDOMAIN"
USERNAME_SUFFIX = "_USERNAME"
PASSWORD_SUFFIX = "_PASSWORD"

# Cache key prefix for resolved environments
ENV_CACHE_PREFIX = "env:"
