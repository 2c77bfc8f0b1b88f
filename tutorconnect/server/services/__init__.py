"""
Service layer.

Pure domain logic (slot generation, the study assistant, the live message
broker) and FastAPI dependencies shared by the routers.
"""
