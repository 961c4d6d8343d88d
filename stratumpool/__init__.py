"""Stratum mining pool messages, block headers, client identification, rate limiting and records."""

__version__ = "0.1.0"

__all__ = ["message", "minerid", "limiter", "header", "job", "hashdata", "payment"]