"""
Plugins package for the hedge broker

Contains optional plugins that extend functionality without affecting core operations.
"""

from .audit_log import AuditLog
from .notifier import AlertPlugin

__all__ = ['AuditLog', 'AlertPlugin']
