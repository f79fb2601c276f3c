"""AttendFlow eligibility engine.

This package is organized by feature modules (attendance, policies, tokens,
teams, ...) with service/repository layers over MySQL and a pluggable
notification channel.
"""
