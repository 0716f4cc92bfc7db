# run_tests.py
"""
Test runner for the whole back office.
Runs every app with Django's runner against config.settings.test.
"""
import os
import sys

import django

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.test')
django.setup()

from django.conf import settings  # noqa: E402
from django.test.utils import get_runner  # noqa: E402

ALL_APPS = [
    'apps.core',
    'apps.accounts',
    'apps.clients',
    'apps.applications',
    'apps.service_requests',
]

# Credentials and payment derivation
CRITICAL_APPS = [
    'apps.accounts',
    'apps.applications',
]


def run(labels, title):
    print("=" * 80)
    print(title)
    print("=" * 80)
    print()

    TestRunner = get_runner(settings)
    test_runner = TestRunner(verbosity=2, interactive=False)
    failures = test_runner.run_tests(labels)

    print()
    print("=" * 80)
    if failures:
        print(f"❌ TESTS FAILED: {failures} failure(s)")
    else:
        print("✅ ALL TESTS PASSED!")
    print("=" * 80)
    return failures


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description='Run tests for the back office')
    parser.add_argument('--app', type=str, help='Run tests for a single app (e.g. clients, applications)')
    parser.add_argument('--critical', action='store_true', help='Run only the accounts and applications tests')
    args = parser.parse_args()

    if args.app:
        sys.exit(run([f'apps.{args.app}'], f"TESTS - apps.{args.app}"))
    elif args.critical:
        sys.exit(run(CRITICAL_APPS, "CRITICAL TESTS - Credentials & Payments"))
    else:
        sys.exit(run(ALL_APPS, "FULL TEST SUITE"))
