"""Pure domain primitives for the invoicing kernel."""
