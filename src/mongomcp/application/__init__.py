"""Application layer: operation handlers and the dispatcher."""
