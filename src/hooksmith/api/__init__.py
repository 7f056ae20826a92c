"""HTTP surface for receiving repository webhooks."""
