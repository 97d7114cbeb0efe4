"""
Custom exceptions for the search layer
"""

class NavigatorSearchError(Exception):
    """Base exception for the search layer"""
    pass

class ValidationError(NavigatorSearchError):
    """Invalid input or setup: settings, STIX bundles, panel indices, timers armed outside an event loop"""
    pass

class NotFoundError(NavigatorSearchError):
    """Domain version not found in the data store"""
    pass

class DatabaseError(NavigatorSearchError):
    """Database operation error"""
    pass
