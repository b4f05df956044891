"""Core domain package for geoscope.

Core contains location resolution, region aggregation, spatial queries,
visibility planning and search without any loader- or UI-specific code,
keeping the business logic portable.
"""
