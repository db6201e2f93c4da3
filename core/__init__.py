"""Core building blocks: options, errors, backends and response parsing."""
