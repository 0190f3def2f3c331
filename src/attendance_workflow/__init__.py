"""Attendance & approval workflow engine.

This package is organized by feature modules (attendance, leave_balances,
requests, overtime, notifications) with a thin Flask controller layer over
service/repository layers.
"""

__version__ = "0.1.0"
