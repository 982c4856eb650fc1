"""Test package for the assistant chat client.

Unit tests cover isolated logic and integration tests cover whole sessions
and the HTTP surface.

Structure:
    - unit/: Individual function and class tests
    - integration/: Controller and FastAPI workflow tests
    - helpers.py: Stream encoders and the scripted assistant service

The assistant service is replaced by httpx.MockTransport; no network access
is needed. Leverages pytest with pytest-check for soft assertions.
"""
