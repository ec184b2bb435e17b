"""Notification adapters."""

from cronlock.adapters.notify.mail import MailNotifier

__all__ = ["MailNotifier"]
