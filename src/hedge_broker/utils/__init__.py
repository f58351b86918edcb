"""
Utilities - configuration, logging and notifications
"""
