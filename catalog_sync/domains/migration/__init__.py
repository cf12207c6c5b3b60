"""
Migration domain: run orchestration, history and the daily schedule
"""
