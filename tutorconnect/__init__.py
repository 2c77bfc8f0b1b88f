"""TutorConnect.

Backend service for a tutoring marketplace. Students book one-on-one sessions with
tutors, exchange messages and leave reviews. Tutors publish their weekly and
date-specific availability, and admins broadcast announcements and watch platform
statistics.

Core subpackages
----------------

- ``tutorconnect.core``:

  - Logging and optional Logfire monitoring.
  - Password hashing and access token helpers.
  - SQLModel entities and async repositories.
  - I/O schemas shared by the endpoints.

- ``tutorconnect.server``:

  - The FastAPI application, its routers and the service layer (slot generation,
    the study assistant and the live message broker).
"""
