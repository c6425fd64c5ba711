"""Daycare System package.

This package is organized by feature modules (children, attendance, billing, ...)
with a thin Flask controller layer and SOLID service/repository layers.
"""
