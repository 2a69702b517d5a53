"""Reconcile Active Directory computer accounts against WSUS computer targets."""

__version__ = "1.0.0"
