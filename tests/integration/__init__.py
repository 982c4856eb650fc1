"""Integration tests for components working together as a system.

Coverage:
    - Full chat sessions through SessionController
    - Tool output submission and resumed runs
    - Reset while a reply is still streaming
    - File download proxy and health endpoints via ASGITransport

The assistant service is scripted with httpx.MockTransport.
"""
