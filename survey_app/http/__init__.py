"""HTTP plumbing: problem+json handlers and request ids."""
