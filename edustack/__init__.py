"""EduStack.

Backend for an online course marketplace where tutors publish courses,
students enroll, follow lessons and earn certificates, and administrators
oversee the catalog.

Core subpackages
----------------

- ``edustack.core``:

  - Logging, monitoring, security primitives and the domain error hierarchy.
  - SQLModel entities, repositories and the async session factory.
  - Pydantic I/O models defining the JSON contract of the API.

- ``edustack.server``:

  - FastAPI application, routers, dependencies and services.

Typical workflow
----------------

1. A tutor registers, creates a course, adds sections and lessons and
   publishes it.
2. A student registers and enrolls; paid courses go through a Stripe
   PaymentIntent and the enrollment is created by the webhook.
3. The student records lesson progress. Reaching 100% completes the
   enrollment and issues a certificate.
"""

__version__ = "1.0.0"
