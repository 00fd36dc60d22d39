"""Engagement tracking and subscription feed service."""
