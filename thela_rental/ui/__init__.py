"""
Qt desktop layer for the Thela Rental Manager.

Provides the Fluent main window and the Qt implementations of the platform
capabilities (document picker, URL opener, notifications).
"""
