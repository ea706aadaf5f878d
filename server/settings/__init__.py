"""Django settings entry point.

Settings are split into components and environments and composed
with django-split-settings. ``DJANGO_ENV`` selects the environment
file: ``development`` (default) or ``production``.
"""

from os import environ

import django_stubs_ext
from split_settings.tools import include, optional

# Monkeypatching Django, so stubs will work for all generics,
# see: https://github.com/typeddjango/django-stubs/tree/master/ext
django_stubs_ext.monkeypatch()

environ.setdefault('DJANGO_ENV', 'development')

_ENV = environ['DJANGO_ENV']

_base_settings = (
    'components/common.py',
    'components/logging.py',
    'components/storages.py',
    'components/redis.py',
    'components/thumbnails.py',

    # Select the right env:
    'environments/{0}.py'.format(_ENV),

    # Optionally override some settings:
    optional('environments/local.py'),
)

# Include settings:
include(*_base_settings)
