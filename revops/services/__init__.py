"""Async clients for third-party APIs (Slack, Calendly, Cal.com)"""
