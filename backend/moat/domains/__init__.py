"""
Business domains: company data, quick analysis and valuation.
"""
