"""Mailgun inbound-email webhook relay."""
