"""Security package: request gate, same-origin guard and response headers."""
