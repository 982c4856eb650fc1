"""Unit tests for individual components in isolation.

Ensures fast execution with minimal dependencies.

Coverage:
    - citations/: File naming and citation resolution
    - transcript/: Immutable reducer operations
    - streaming/: Decoding, classification and dispatch
    - client/: Assistant service requests and error mapping
    - config and rendering

Leverages pytest-check for multiple assertions per test.
"""
