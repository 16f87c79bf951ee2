"""
Daybook - Web API.
"""
