# config/settings/__init__.py
"""
Settings package.
manage.py picks development/production from the DJANGO_ENV environment
variable; tests use config.settings.test.
"""
