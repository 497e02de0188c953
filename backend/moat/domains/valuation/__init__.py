"""
Valuation Domain

Ten-year DCF scenarios, their storage and the sensitivity grid around them.
"""
