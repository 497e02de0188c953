"""
Analysis Domain

Quick analysis of a stored company from its yearly statements, and the
user's own judgements about it.
"""
