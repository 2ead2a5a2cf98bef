"""StreetWatch: street issue reporting core.

Submission pipeline, issue collection, and the map/list views derived from it.
"""
