"""
Backend package for the portfolio content service.

This package provides a FastAPI application serving public project and
profile data, accepting contact-form inquiries and exposing an
authenticated admin API, plus a client-side cache for the read endpoints.
"""
