"""Timesheet System package.

This package is organized by feature modules (users, projects, periods,
limits, timesheets, notifications) with a thin Flask controller layer and
service/repository layers underneath.
"""
