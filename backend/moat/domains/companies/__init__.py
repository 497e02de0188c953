"""
Companies Domain

Company records, yearly financial statements and the policy deciding when
they are refetched from market data.
"""
