"""Terminal views of the live spectrum."""
