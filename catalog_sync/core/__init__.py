"""
Core infrastructure for the catalog sync service
"""
