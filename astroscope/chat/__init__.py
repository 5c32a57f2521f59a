"""In-memory chat sessions and the chat API."""
