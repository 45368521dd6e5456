"""Settings for Courtbook.

Pick one of `dev`, `prod` or `test` through DJANGO_SETTINGS_MODULE; each
extends `base` with its environment's database, logging and Celery options.
"""
