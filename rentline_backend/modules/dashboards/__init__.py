"""Dashboards module for RentLine."""
