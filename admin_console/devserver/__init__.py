"""Development stand-in for the order-management service."""
