"""NiceGUI interface - thin visualization layer for the chat.

Responsibilities:
    - Transcript display with streaming updates of the open turn
    - Citation tokens and cited document download links
    - Code interpreter input as numbered lines
    - Error banner, loading indicator and new chat button

Contains no stream logic. Delegates all state changes to the
SessionController and re-renders on its notifications.
"""
