"""Core domain: models, identity keys, aggregation and coalescing."""
