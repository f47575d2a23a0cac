"""
HRMS - Background Tasks Package

Celery background tasks.
"""
