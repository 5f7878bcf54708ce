"""Sabq Smart backend."""
