"""Settings for production deployments."""

from decouple import Csv

from server.settings.components import config

DEBUG = False

ALLOWED_HOSTS = config('DOMAIN_NAMES', cast=Csv(), default='localhost')
