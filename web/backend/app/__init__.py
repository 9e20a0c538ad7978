"""HTTP API for campusvoice."""
