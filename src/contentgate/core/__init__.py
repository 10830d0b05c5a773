"""Cross-cutting infrastructure: logging, errors and rate limiting."""
