"""
Shared models.

``io`` holds the request and response schemas that define the HTTP contract of
the service.
"""
