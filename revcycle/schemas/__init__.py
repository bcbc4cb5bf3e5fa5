"""
Request and response schemas for the revenue cycle API.
"""
