"""Application layer: context store, scopes, level gate, renderer, propagation, and ports."""
