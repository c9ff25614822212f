"""Leave Portal package.

Organized by feature modules (employees, attendance, requests, holidays,
notifications, calendar) with a thin Flask JSON controller layer over
service and repository layers. Each entity service reads and writes the
MySQL backend first and falls back to a local JSON store when it is down.
"""
