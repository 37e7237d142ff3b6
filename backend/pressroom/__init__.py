"""Pressroom: compliance scoring and AI content generation for PR agencies."""

__version__ = "1.0.0"
