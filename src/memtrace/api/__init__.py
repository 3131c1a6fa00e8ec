"""REST API for memtrace."""
