from enum import Enum


# Deployment environment, drives log format, log level and error verbosity
class AppEnvironment(str, Enum):
    LOCAL = "local"
    DEVELOPMENT = "dev"
    STAGING = "staging"
    PRODUCTION = "prod"
