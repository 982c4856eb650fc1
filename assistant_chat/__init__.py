"""Research Assistant Chat - browser client for a hosted assistant service.

Relays user messages to the assistant API, folds the streamed run events into
a conversation transcript and renders cited documents as download links.

Components:
    - citations: citation marker resolution and file link formatting
    - transcript: immutable conversation transcript reducer
    - streaming: event stream decoding, classification and dispatch
    - session: thread lifecycle, input/loading/error state
    - client: HTTP client for the assistant service
    - api: FastAPI app with the file download proxy
    - ui: NiceGUI chat page
    - models: shared Pydantic schemas
"""

__version__ = "0.1.0"
