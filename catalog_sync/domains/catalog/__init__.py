"""
Destination catalog domain: store access, identity correlation and reconciliation
"""
