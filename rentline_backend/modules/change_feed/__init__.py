"""Realtime change feed module for RentLine."""
