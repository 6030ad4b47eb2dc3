"""Volunteer Attendance package.

Organized by feature modules (volunteers, users, attendance, dashboard) with a
thin Flask controller layer over service/repository layers.
"""
