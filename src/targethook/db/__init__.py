"""Database models and engine setup."""
