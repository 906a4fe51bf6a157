# conftest.py: pytest config to keep tests stable and fast

import os
import pytest

# Ensure Django settings are discoverable for pytest
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "foodbank.settings")
# Run Celery tasks inline; no broker in tests
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "1")


# --- Relax settings so Client() requests are resilient in tests --------------
@pytest.fixture(autouse=True)
def _relaxed_test_settings(settings):
    settings.SECURE_SSL_REDIRECT = False
    settings.ALLOWED_HOSTS = ["*", "testserver", "localhost", "127.0.0.1"]


# --- Job records live in the cache; start every test clean ------------------
@pytest.fixture(autouse=True)
def _clear_cache():
    from django.core.cache import cache

    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def probabilities():
    from simulator.categories import ReferralProbabilities

    return ReferralProbabilities(single=0.3, couple=0.2, family=0.25, large_family=0.1)
